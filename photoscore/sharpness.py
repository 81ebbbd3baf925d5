"""
Sharpness scoring from Laplacian variance.
Higher variance means more high-frequency detail, i.e. sharper focus.
"""
from photoscore import config
from photoscore.models import BlurResult, EdgeResponseMap, RawImage
from photoscore.pixels import edge_response, to_grayscale
from photoscore.scoring import clamp, round_score


def blur_from_variance(variance: float) -> BlurResult:
    return BlurResult(score=round_score(clamp(variance / config.LAPLACIAN_DIVISOR)))


def blur_from_edges(edges: EdgeResponseMap) -> BlurResult:
    return blur_from_variance(edges.variance)


def score_sharpness(image: RawImage) -> BlurResult:
    return blur_from_edges(edge_response(to_grayscale(image)))
