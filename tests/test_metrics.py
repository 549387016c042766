"""Tests for fidelity metrics and the accelerated-versus-reference check."""

import math

import numpy as np
import pytest
from engines.fidelity import check_fidelity
from engines.pipeline import CodecPipeline
from models.codec_params import CodecParams
from models.errors import DimensionMismatch
from utils.constants import PSNR_SENTINEL
from utils.fixed_point import FixedPointFormat, SaturationCounter, resolve_precision, round_half_away
from utils.metrics import compression_stats, exact_match, psnr, ssim
from utils.test_images import (
    generate_checkerboard, generate_gradient, generate_rgb_planes, generate_stripes,
)


# === Exact match ===

def test_exact_match_counts_differences():
    a = np.arange(64, dtype=np.int16)
    b = a.copy()
    assert exact_match(a, b) == 0
    b[[3, 10, 63]] += 1
    assert exact_match(a, b) == 3


def test_exact_match_rejects_unequal_shapes():
    with pytest.raises(DimensionMismatch):
        exact_match(np.zeros(64), np.zeros(63))
    with pytest.raises(DimensionMismatch):
        exact_match(np.zeros((8, 8)), np.zeros(64))


# === PSNR / SSIM ===

def test_psnr_identical_planes_is_sentinel():
    plane = generate_gradient(16, 16)
    value = psnr(plane, plane.copy())
    assert value == PSNR_SENTINEL
    assert math.isfinite(value)


def test_psnr_known_value():
    """Uniform error of 1 gives MSE 1, PSNR 10*log10(255^2)."""
    a = np.zeros((8, 8), dtype=np.uint8)
    b = np.ones((8, 8), dtype=np.uint8)
    assert psnr(a, b) == pytest.approx(10 * math.log10(255 ** 2))


def test_psnr_does_not_wrap_uint8():
    a = np.zeros((4, 4), dtype=np.uint8)
    b = np.full((4, 4), 255, dtype=np.uint8)
    assert psnr(a, b) == pytest.approx(0.0)


def test_psnr_rejects_unequal_planes():
    with pytest.raises(DimensionMismatch):
        psnr(np.zeros((8, 8)), np.zeros((8, 9)))


def test_ssim():
    plane = generate_gradient(16, 16)
    assert ssim(plane, plane) == pytest.approx(1.0)
    noisy = np.clip(plane.astype(int) + 40, 0, 255).astype(np.uint8)
    assert ssim(plane, noisy) < 1.0
    with pytest.raises(ValueError):
        ssim(np.zeros((2, 8)), np.zeros((2, 8)))


# === Compression statistics ===

def test_compression_stats():
    pipeline = CodecPipeline(CodecParams(quality=50))
    encoded = pipeline.encode_channel(generate_checkerboard(32, 32))
    stats = compression_stats(encoded.blocks, encoded.width, encoded.height)
    assert stats['blocks'] == 16
    assert stats['tokens'] == encoded.token_count
    assert stats['total_coeffs'] == 16 * 64
    assert stats['compression_ratio'] > 1.0


def test_high_frequency_content_costs_more_tokens():
    """Fine stripes leave many nonzero AC terms; flat blocks leave one."""
    pipeline = CodecPipeline(CodecParams(quality=90))
    flat = pipeline.encode_channel(generate_checkerboard(32, 32))
    stripes = pipeline.encode_channel(generate_stripes(32, 32))
    flat_stats = compression_stats(flat.blocks, 32, 32)
    stripe_stats = compression_stats(stripes.blocks, 32, 32)
    assert stripe_stats['tokens'] > flat_stats['tokens']
    assert stripe_stats['nonzero_count'] > flat_stats['nonzero_count']
    assert stripe_stats['compression_ratio'] < flat_stats['compression_ratio']


# === Fixed point ===

def test_round_half_away():
    assert round_half_away(np.array([0.5, -0.5, 1.5, -2.5, 0.49])).tolist() == [1, -1, 2, -3, 0]


def test_fixed_point_format_grid_and_range():
    fmt = FixedPointFormat(8, 4)
    assert fmt.step == 1 / 16
    assert fmt.min_value == -8 and fmt.max_value == 8 - 1 / 16
    counter = SaturationCounter()
    snapped = fmt.quantize(np.array([0.03, 0.04, 100.0, -100.0]), counter)
    assert snapped.tolist() == [0.0, 0.0625, 8 - 1 / 16, -8.0]
    assert counter.by_stage == {'intermediate': 2}


def test_fixed_point_format_validation():
    with pytest.raises(ValueError):
        FixedPointFormat(8, 0)
    with pytest.raises(ValueError):
        FixedPointFormat(8, 9)
    with pytest.raises(ValueError):
        resolve_precision('bf16')
    assert resolve_precision('fixed24') == FixedPointFormat(24, 12)


def test_saturation_counter_is_thread_safe():
    import threading

    counter = SaturationCounter()
    threads = [threading.Thread(target=lambda: [counter.add('x', 1) for _ in range(1000)])
               for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert counter.total == 8000
    counter.reset()
    assert counter.total == 0


# === Accelerated vs reference ===

def test_reference_against_itself_is_bit_exact():
    report = check_fidelity(generate_rgb_planes(24, 16), CodecParams(quality=75))
    assert report.bit_exact
    assert report.total_blocks == 3 * 6
    assert len(report.psnr_channels) == 3


def test_fixed_point_path_close_to_reference():
    planes = [generate_gradient(32, 32), generate_checkerboard(32, 32)]
    report = check_fidelity(planes, CodecParams(precision='fixed24', quality=90))
    assert report.accelerated_precision == 'fixed24'
    assert report.reference_precision == 'double'
    assert report.coefficient_mismatches <= 32 * 32 * 2 // 10
    assert report.token_mismatch_blocks <= report.total_blocks
    assert report.psnr_mean > 30.0
    assert 0.0 < report.ssim_mean <= 1.0


def test_lossless_fidelity_reaches_sentinel():
    planes = [generate_checkerboard(16, 16, square=8)]
    report = check_fidelity(planes, CodecParams(quant_table=np.ones((8, 8))))
    assert report.psnr_mean == PSNR_SENTINEL


def test_narrow_accelerator_is_flagged():
    """An overflowing fixed-point format diverges and reports saturation."""
    planes = [generate_checkerboard(16, 16, square=8)]
    report = check_fidelity(planes, CodecParams(precision=FixedPointFormat(16, 8)))
    assert not report.bit_exact
    assert report.coefficient_mismatches > 0
    assert report.saturation.get('intermediate', 0) > 0
    assert report.accelerated_precision == 'fixed<16,8>'
