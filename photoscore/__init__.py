from photoscore.core import ImageAnalyzer
from photoscore.errors import AnalysisError, DecodeError, DetectionFailure, InvalidInput
from photoscore.models import (AnalysisResult, BlurResult, FaceExpression,
                               LightingResult, RawImage, SmileResult)

__all__ = [
    "ImageAnalyzer",
    "AnalysisError", "DecodeError", "DetectionFailure", "InvalidInput",
    "AnalysisResult", "BlurResult", "FaceExpression", "LightingResult", "RawImage", "SmileResult",
]
