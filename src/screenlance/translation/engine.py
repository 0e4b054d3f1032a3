"""ONNX Runtime inference for encoder-decoder translation models.

Tensor contract (names and dtypes must match the exported graphs):

    encoder: input_ids int32[1, L]                  -> last_hidden_state float[1, L, H]
    decoder: input_ids int32[1, S],
             encoder_hidden_states float[1, L, H]   -> logits float[1, S, V]

The encoder runs once per request. Its output is owned by an
``EncoderHiddenState`` and lent to every decode step as a read-only view.
"""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

import numpy as np
import onnxruntime as ort
from numpy.typing import NDArray

from .. import log
from ..errors import DecoderFailure, EncoderFailure, ModelLoadError

logger = log.get_logger()

ENCODER_INPUT = "input_ids"
ENCODER_OUTPUT = "last_hidden_state"
DECODER_INPUT_IDS = "input_ids"
DECODER_HIDDEN_STATES = "encoder_hidden_states"
DECODER_OUTPUT = "logits"

# ONNX Runtime severities: 0 verbose, 1 info, 2 warning, 3 error
ORT_SEVERITY_WARNING = 2
ORT_SEVERITY_INFO = 1


class EncoderHiddenState:
    """Owns the encoder output for one translation request.

    The buffer is never written after construction. Decode steps do not get
    copies: ``borrow()`` lends a non-writeable view over the same memory,
    valid only inside the ``with`` block and only while the owner has not
    been released.
    """

    def __init__(self, data: NDArray[np.float32]):
        if data.ndim != 3 or data.shape[0] != 1:
            raise ValueError(f"hidden state must have shape [1, L, H], got {list(data.shape)}")
        data.flags.writeable = False
        self._data: NDArray[np.float32] | None = data
        self._borrowed = 0

    @property
    def shape(self) -> tuple[int, ...]:
        return self._owned().shape

    @property
    def dtype(self) -> np.dtype:
        return self._owned().dtype

    @property
    def size(self) -> int:
        return self._owned().size

    @property
    def released(self) -> bool:
        return self._data is None

    def _owned(self) -> NDArray[np.float32]:
        if self._data is None:
            raise RuntimeError("encoder hidden state has been released")
        return self._data

    @contextmanager
    def borrow(self) -> Iterator[NDArray[np.float32]]:
        """Lend a read-only view aliasing the hidden-state buffer."""
        view = self._owned().view()
        view.flags.writeable = False
        self._borrowed += 1
        try:
            yield view
        finally:
            self._borrowed -= 1

    def release(self) -> None:
        """Drop the buffer. No view may be outstanding."""
        if self._borrowed:
            raise RuntimeError("encoder hidden state released while borrowed")
        self._data = None


def select_next_token(logits: NDArray[np.floating]) -> int:
    """Pick the greedy next token from decoder logits.

    Only the last time step of ``logits`` ([1, S, V]) is considered. Ties
    resolve to the lowest token id.
    """
    last_step = logits[0, -1, :]
    # np.argmax returns the first index among equal maxima
    return int(np.argmax(last_step))


def _ids_tensor(ids: Sequence[int]) -> NDArray[np.int32]:
    return np.asarray([list(ids)], dtype=np.int32)


class Engine:
    """Runs the encoder once and the decoder step by step.

    Sessions are created once and shared read-only by every request; all
    tensors built here belong to the call that built them.
    """

    def __init__(self, encoder_session, decoder_session):
        """Wrap already created sessions.

        Args:
            encoder_session: Object with ``run(output_names, feeds)`` for the encoder.
            decoder_session: Object with ``run(output_names, feeds)`` for the decoder.
        """
        self._encoder = encoder_session
        self._decoder = decoder_session

    @classmethod
    def load(
        cls,
        encoder_path: str | Path,
        decoder_path: str | Path,
        threads: int = 1,
        debug: bool = False,
    ) -> "Engine":
        """Create CPU inference sessions for both graphs.

        Args:
            encoder_path: Path to the encoder ONNX graph.
            decoder_path: Path to the decoder ONNX graph.
            threads: Intra-op thread count.
            debug: If True, ONNX Runtime logs at info level.

        Raises:
            ModelLoadError: If a graph is missing or cannot be loaded.
        """
        options = ort.SessionOptions()
        options.intra_op_num_threads = threads
        options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        options.log_severity_level = ORT_SEVERITY_INFO if debug else ORT_SEVERITY_WARNING

        sessions = []
        for path, what in ((Path(encoder_path), "encoder model"), (Path(decoder_path), "decoder model")):
            if not path.is_file():
                raise ModelLoadError(path, what, "file not found")
            try:
                session = ort.InferenceSession(
                    str(path),
                    sess_options=options,
                    providers=["CPUExecutionProvider"],
                )
            except Exception as e:
                raise ModelLoadError(path, what, str(e)) from e
            sessions.append(session)

        logger.info("engine ready", encoder=Path(encoder_path).name, decoder=Path(decoder_path).name, threads=threads)
        return cls(*sessions)

    def run_encoder(self, ids: Sequence[int]) -> EncoderHiddenState:
        """Encode source token ids.

        Args:
            ids: Non-empty source token ids.

        Returns:
            The hidden state for this request.

        Raises:
            EncoderFailure: If the encoder graph fails or returns a malformed tensor.
        """
        feeds = {ENCODER_INPUT: _ids_tensor(ids)}
        try:
            outputs = self._encoder.run([ENCODER_OUTPUT], feeds)
        except Exception as e:
            raise EncoderFailure(f"encoder run failed: {e}") from e

        hidden = np.asarray(outputs[0])
        try:
            return EncoderHiddenState(hidden)
        except ValueError as e:
            raise EncoderFailure(str(e)) from e

    def decode_greedy(
        self,
        hidden: EncoderHiddenState,
        bos_id: int,
        eos_id: int,
        max_steps: int,
    ) -> list[int]:
        """Generate target ids one token at a time.

        Args:
            hidden: Encoder output for this request.
            bos_id: Id the decoder input starts with.
            eos_id: Id that ends generation (never returned).
            max_steps: Upper bound on decoder runs; reaching it truncates.

        Returns:
            Generated ids, possibly empty.

        Raises:
            DecoderFailure: If a decoder run fails or returns malformed logits.
        """
        decoder_ids = [bos_id]
        output: list[int] = []

        for step in range(max_steps):
            with hidden.borrow() as hidden_view:
                feeds = {
                    DECODER_INPUT_IDS: _ids_tensor(decoder_ids),
                    DECODER_HIDDEN_STATES: hidden_view,
                }
                try:
                    outputs = self._decoder.run([DECODER_OUTPUT], feeds)
                except Exception as e:
                    raise DecoderFailure(f"decoder run failed at step {step}: {e}", step=step) from e

            logits = np.asarray(outputs[0])
            if logits.ndim != 3 or logits.shape[1] == 0 or logits.shape[2] == 0:
                raise DecoderFailure(
                    f"decoder returned logits of shape {list(logits.shape)}, expected [1, S, V]",
                    step=step,
                )

            next_id = select_next_token(logits)
            if next_id == eos_id:
                break
            output.append(next_id)
            decoder_ids.append(next_id)

        return output
