"""Compare an accelerated codec configuration against the reference path."""

import logging
from dataclasses import replace
from typing import Optional, Sequence

import numpy as np

from models.codec_params import CodecParams
from models.fidelity_report import FidelityReport
from engines.block_processor import as_plane
from engines.pipeline import CodecPipeline
from engines.rle import token_mismatches
from utils.metrics import Timer, exact_match, psnr, ssim

logger = logging.getLogger(__name__)


def check_fidelity(
    planes: Sequence[np.ndarray],
    accelerated: CodecParams,
    reference: Optional[CodecParams] = None,
) -> FidelityReport:
    """
    Run the same planes through two pipelines and report how far apart
    they are.

    ``reference`` defaults to ``accelerated`` with double precision. The
    report counts raw coefficient mismatches (coefficient planes compared
    position by position), blocks whose token streams differ after
    quantization, and the PSNR/SSIM of the accelerated round trip against
    the original planes.
    """
    if reference is None:
        reference = replace(accelerated, precision='double')
    planes = [as_plane(plane) for plane in planes]

    accel = CodecPipeline(accelerated)
    ref = CodecPipeline(reference)
    timer = Timer()

    coefficient_mismatches = sum(
        exact_match(accel.transform_channel(plane), ref.transform_channel(plane))
        for plane in planes
    )
    accel.counter.reset()

    accel_encoded = timer.measure_encode(accel.encode_planes, planes)
    ref_encoded = ref.encode_planes(planes)
    token_mismatch_blocks = sum(
        token_mismatches(a.blocks, r.blocks) for a, r in zip(accel_encoded, ref_encoded)
    )
    total_blocks = sum(len(channel.blocks) for channel in accel_encoded)

    reconstructed = timer.measure_decode(accel.decode_planes, accel_encoded)
    psnr_channels = [psnr(p, r) for p, r in zip(planes, reconstructed)]
    ssim_values = [ssim(p, r) for p, r in zip(planes, reconstructed) if min(p.shape) >= 3]

    report = FidelityReport(
        accelerated_precision=str(accelerated.precision),
        reference_precision=str(reference.precision),
        coefficient_mismatches=coefficient_mismatches,
        token_mismatch_blocks=token_mismatch_blocks,
        total_blocks=total_blocks,
        psnr_channels=psnr_channels,
        psnr_mean=float(np.mean(psnr_channels)) if psnr_channels else 0.0,
        ssim_mean=float(np.mean(ssim_values)) if ssim_values else float('nan'),
        saturation=accel.counter.by_stage,
        encode_time_ms=timer.encode_time_ms,
        decode_time_ms=timer.decode_time_ms,
    )
    logger.debug(
        "Fidelity %s vs %s: %d coefficient mismatches, %d/%d token blocks differ, PSNR %.2f dB",
        report.accelerated_precision, report.reference_precision,
        coefficient_mismatches, token_mismatch_blocks, total_blocks, report.psnr_mean,
    )
    return report
