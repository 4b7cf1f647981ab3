from pathlib import Path
from typing import Optional, Union

import librosa
import numpy as np
import soundfile as sf

from .errors import InvalidSignal
from .types import Signal


def load_signal(path: Union[str, Path], name: Optional[str] = None) -> Signal:
    """Decode an audio file into a mono Signal. Stereo is folded by averaging."""
    path = Path(path)
    samples, sr = sf.read(str(path), dtype="float64", always_2d=False)
    samples = np.asarray(samples)
    if samples.ndim > 1:
        # samples is (num_samples, num_channels); librosa wants (channels, samples)
        samples = librosa.to_mono(samples.T)
    return Signal(samples, float(sr), name if name is not None else path.stem)


def cut_audio(signal: Signal, clip_length_sec: float,
              start_sec: Optional[float] = None, seed: int = 42) -> Signal:
    """Cut a clip of *clip_length_sec* seconds, at *start_sec* or at a seeded random start."""
    total_samples = len(signal)
    clip_samples = int(clip_length_sec * signal.sample_rate)
    if clip_samples <= 0:
        raise InvalidSignal(f"Clip length must be positive, got {clip_length_sec}s")
    if clip_samples >= total_samples:
        return signal
    if start_sec is None:
        rng = np.random.default_rng(seed)
        start = int(rng.integers(0, total_samples - clip_samples))
    else:
        start = min(int(start_sec * signal.sample_rate), total_samples - clip_samples)
    end = start + clip_samples
    return Signal(signal.samples[start:end], signal.sample_rate, signal.name)


def inject_noise(signal: Signal, snr_db: float, seed: Optional[int] = None) -> Signal:
    """
    Add white Gaussian noise to `signal` to get the desired SNR in dB.
    The result is clipped back into [-1, 1].
    """
    samples = signal.samples

    # signal power (mean square)
    signal_power = np.mean(samples ** 2) if len(samples) else 0.0

    if signal_power == 0:
        # silent signal, nothing to scale the noise against
        return signal

    noise_power = signal_power / (10 ** (snr_db / 10))
    rng = np.random.default_rng(seed)
    noise = rng.normal(0.0, np.sqrt(noise_power), size=samples.shape)

    return Signal(np.clip(samples + noise, -1.0, 1.0), signal.sample_rate, signal.name)
