from .ports import GenerationBackend
from .results import Failure, FailureKind, ImagePart, InputPart, Success, TextPart, UpstreamResult
from .gateway import (
    GenerationRequest,
    GenerationResult,
    HistoryTurn,
    ImageAnalysisRequest,
    PromptGateway,
)

__all__ = [
    "GenerationBackend",
    "Failure",
    "FailureKind",
    "ImagePart",
    "InputPart",
    "Success",
    "TextPart",
    "UpstreamResult",
    "GenerationRequest",
    "GenerationResult",
    "HistoryTurn",
    "ImageAnalysisRequest",
    "PromptGateway",
]
