import numpy as np
import pytest
import soundfile as sf

from probefinder.audio import cut_audio, inject_noise, load_signal
from probefinder.errors import InvalidSignal
from probefinder.types import Signal
from tests.helpers import SAMPLE_RATE, tone_frame


@pytest.fixture
def one_second():
    return Signal(np.random.uniform(-0.5, 0.5, int(SAMPLE_RATE)), SAMPLE_RATE, "noise")


class TestCutAudio:

    def test_clip_length_and_name(self, one_second):
        clip = cut_audio(one_second, 0.25)
        assert len(clip) == int(0.25 * SAMPLE_RATE)
        assert clip.name == "noise"
        assert clip.sample_rate == SAMPLE_RATE

    def test_same_seed_same_clip(self, one_second):
        a = cut_audio(one_second, 0.1, seed=7)
        b = cut_audio(one_second, 0.1, seed=7)
        np.testing.assert_array_equal(a.samples, b.samples)

    def test_explicit_start(self, one_second):
        clip = cut_audio(one_second, 0.1, start_sec=0.5)
        start = int(0.5 * SAMPLE_RATE)
        np.testing.assert_array_equal(clip.samples, one_second.samples[start:start + len(clip)])

    def test_start_past_the_end_is_clamped(self, one_second):
        clip = cut_audio(one_second, 0.1, start_sec=5.0)
        np.testing.assert_array_equal(clip.samples, one_second.samples[-len(clip):])

    def test_long_clip_returns_whole_signal(self, one_second):
        assert cut_audio(one_second, 3.0) is one_second

    def test_non_positive_length(self, one_second):
        with pytest.raises(InvalidSignal):
            cut_audio(one_second, 0.0)


class TestInjectNoise:

    @pytest.mark.parametrize("snr_db", [0.0, 10.0, 20.0])
    def test_reaches_requested_snr(self, snr_db):
        clean = Signal(np.tile(tone_frame([64], [0.1]), 40), SAMPLE_RATE)
        noisy = inject_noise(clean, snr_db, seed=0)
        noise = noisy.samples - clean.samples
        measured = 10 * np.log10(np.mean(clean.samples ** 2) / np.mean(noise ** 2))
        assert measured == pytest.approx(snr_db, abs=0.5)

    def test_output_stays_in_range(self):
        loud = Signal(np.ones(4096) * 0.99, SAMPLE_RATE)
        noisy = inject_noise(loud, -10.0, seed=1)
        assert noisy.samples.max() <= 1.0
        assert noisy.samples.min() >= -1.0

    def test_silence_is_left_alone(self):
        silent = Signal(np.zeros(2048), SAMPLE_RATE)
        assert inject_noise(silent, 5.0) is silent


class TestLoadSignal:

    def test_mono_file(self, tmp_path):
        samples = tone_frame([32], [0.3])
        path = tmp_path / "tone.wav"
        sf.write(str(path), samples, int(SAMPLE_RATE), subtype="DOUBLE")

        signal = load_signal(path)
        assert signal.name == "tone"
        assert signal.sample_rate == SAMPLE_RATE
        np.testing.assert_allclose(signal.samples, samples)

    def test_stereo_is_folded_to_mono(self, tmp_path):
        left = tone_frame([32], [0.4])
        path = tmp_path / "stereo.wav"
        sf.write(str(path), np.stack([left, np.zeros_like(left)], axis=1),
                 int(SAMPLE_RATE), subtype="DOUBLE")

        signal = load_signal(path, name="folded")
        assert signal.samples.ndim == 1
        assert signal.name == "folded"
        np.testing.assert_allclose(signal.samples, left / 2, atol=1e-7)

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "garbage.wav"
        path.write_bytes(b"not audio at all")
        with pytest.raises(RuntimeError):
            load_signal(path)
