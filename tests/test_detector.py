from types import SimpleNamespace

import numpy as np
import pytest

from photoscore.detector import DeepFaceDetector
from photoscore.expression import smile_from_expression
from photoscore.models import RawImage


class FakeFaceMesh:
    def __init__(self, landmarks, **kwargs):
        self.landmarks = landmarks
        self.kwargs = kwargs

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def process(self, image_rgb):
        assert image_rgb.dtype == np.uint8 and image_rgb.shape[-1] == 3
        if not self.landmarks:
            return SimpleNamespace(multi_face_landmarks=None)
        return SimpleNamespace(multi_face_landmarks=[SimpleNamespace(landmark=self.landmarks)])


class FakeDeepFace:
    def __init__(self, emotion, strict=False):
        self.emotion = emotion
        self.strict = strict
        self.calls = []

    def analyze(self, img_path, actions, **kwargs):
        if kwargs and self.strict:
            raise TypeError("unexpected keyword argument")
        self.calls.append(kwargs)
        return [{"emotion": self.emotion, "face_confidence": 0.97}]


def _detector(landmarks, deepface):
    det = DeepFaceDetector.__new__(DeepFaceDetector)
    det._deepface = deepface
    det._face_mesh = SimpleNamespace(FaceMesh=lambda **kw: FakeFaceMesh(landmarks, **kw))
    det.detector_backend = "opencv"
    det.min_detection_confidence = 0.5
    return det


FACE = [SimpleNamespace(x=0.25, y=0.2), SimpleNamespace(x=0.75, y=0.9)]
PERCENTAGES = {"happy": 80.0, "neutral": 10.0, "sad": 4.0, "angry": 1.0,
               "surprise": 3.0, "fear": 1.0, "disgust": 1.0}


def test_no_landmarks_means_no_face():
    deepface = FakeDeepFace(PERCENTAGES)
    det = _detector([], deepface)
    assert det.detect(RawImage(np.zeros((40, 40, 3), dtype=np.uint8))) is None
    assert deepface.calls == []


def test_emotions_are_mapped_and_scaled():
    det = _detector(FACE, FakeDeepFace(PERCENTAGES))
    face = det.detect(RawImage(np.zeros((100, 200, 3), dtype=np.uint8)))
    assert set(face.emotions) == {"happy", "neutral", "sad", "angry", "surprised"}
    assert face.emotions["happy"] == pytest.approx(0.8)
    assert face.emotions["surprised"] == pytest.approx(0.03)
    assert face.confidence == pytest.approx(0.97)
    assert face.box == (50, 20, 100, 70)


def test_grayscale_input_and_old_deepface_signature():
    deepface = FakeDeepFace({"happy": 0.6, "neutral": 0.4}, strict=True)
    det = _detector(FACE, deepface)
    face = det.detect(RawImage(np.full((10, 10), 128, dtype=np.uint8)))
    assert face.emotions["happy"] == pytest.approx(0.6)
    assert face.emotions["sad"] == 0.0
    assert deepface.calls == [{}]


def test_fear_dominated_percentages_are_not_read_as_probabilities():
    payload = {"happy": 0.9, "neutral": 0.3, "sad": 0.1, "angry": 0.05,
               "surprise": 0.05, "fear": 97.6, "disgust": 1.0}
    det = _detector(FACE, FakeDeepFace(payload))
    face = det.detect(RawImage(np.zeros((40, 40, 3), dtype=np.uint8)))
    assert face.emotions["happy"] == pytest.approx(0.009)

    res = smile_from_expression(face)
    assert res.score < 45
    assert res.confidence == "neutral"
    assert not res.has_smile
