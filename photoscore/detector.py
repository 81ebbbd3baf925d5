"""
Face detectors feeding the expression scorer.

The scorer only needs ``detect(image) -> FaceExpression | None``. The DeepFace
implementation gates on MediaPipe FaceMesh (no landmarks -> no face, which is
a normal ``None`` result) and then reads DeepFace's emotion probabilities.
Heavy model imports happen in ``load_face_detector``, not at import time.
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import cv2
import numpy as np

from photoscore.models import FaceExpression, RawImage

# DeepFace emotion name -> our emotion name
_EMOTION_KEYS = {
    "happy": "happy",
    "neutral": "neutral",
    "sad": "sad",
    "angry": "angry",
    "surprise": "surprised",
}


class FaceDetector(ABC):
    @abstractmethod
    def detect(self, image: RawImage) -> Optional[FaceExpression]:
        """Return expression probabilities for the main face, or None when no face is found."""


class DeepFaceDetector(FaceDetector):
    def __init__(self, detector_backend: str = "retinaface", min_detection_confidence: float = 0.5):
        from deepface import DeepFace
        import mediapipe as mp

        self._deepface = DeepFace
        self._face_mesh = mp.solutions.face_mesh
        self.detector_backend = detector_backend
        self.min_detection_confidence = min_detection_confidence

    # ---------- utils ----------
    @staticmethod
    def _rgb_uint8(image: RawImage) -> np.ndarray:
        px = np.clip(np.asarray(image.pixels, dtype=np.float64), 0, 255).astype(np.uint8)
        if px.ndim == 2:
            return cv2.cvtColor(px, cv2.COLOR_GRAY2RGB)
        if px.shape[-1] == 1:
            return cv2.cvtColor(px[..., 0], cv2.COLOR_GRAY2RGB)
        return np.ascontiguousarray(px[..., :3])

    # ---------- mediapipe ----------
    def face_box(self, image_rgb: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
        """Bounding box (x, y, w, h) of the first FaceMesh face, or None."""
        h, w = image_rgb.shape[:2]
        with self._face_mesh.FaceMesh(static_image_mode=True,
                                      max_num_faces=1,
                                      refine_landmarks=True,
                                      min_detection_confidence=self.min_detection_confidence) as fm:
            res = fm.process(image_rgb)
            if not res.multi_face_landmarks:
                return None
            lm = res.multi_face_landmarks[0].landmark
            xs = [p.x * w for p in lm]
            ys = [p.y * h for p in lm]
            x0, y0 = max(0, int(min(xs))), max(0, int(min(ys)))
            return x0, y0, int(max(xs)) - x0, int(max(ys)) - y0

    # ---------- deepface ----------
    def emotion_probs(self, image_bgr: np.ndarray) -> Tuple[dict, Optional[float]]:
        """Return ({emotion: probability in [0,1]}, face_confidence), tolerant to API changes."""
        try:
            out = self._deepface.analyze(
                img_path=image_bgr,
                actions=["emotion"],
                detector_backend=self.detector_backend,
                enforce_detection=False,
            )
        except TypeError:
            out = self._deepface.analyze(img_path=image_bgr, actions=["emotion"])

        res = out[0] if isinstance(out, list) else out
        emo = res.get("emotion") or res.get("emotions") or {}
        raw = {ours: float(emo.get(theirs, 0.0)) for theirs, ours in _EMOTION_KEYS.items()}
        # DeepFace reports percentages over all of its emotions, kept or not
        scale = 100.0 if sum(float(v) for v in emo.values()) > 1.5 else 1.0
        probs = {k: float(np.clip(v / scale, 0.0, 1.0)) for k, v in raw.items()}
        conf = res.get("face_confidence")
        return probs, None if conf is None else float(conf)

    def detect(self, image: RawImage) -> Optional[FaceExpression]:
        rgb = self._rgb_uint8(image)
        box = self.face_box(rgb)
        if box is None:
            return None
        probs, conf = self.emotion_probs(cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))
        return FaceExpression(emotions=probs, confidence=conf, box=box)


def load_face_detector(detector_backend: str = "retinaface") -> FaceDetector:
    """Load models once; hand the ready detector to ImageAnalyzer."""
    return DeepFaceDetector(detector_backend=detector_backend)
