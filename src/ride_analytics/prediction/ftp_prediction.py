"""FTP prediction from ride history, remote first with a local fallback."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from ..analytics.ftp_detection import FtpConfidence, FtpDetector, FtpMethod
from ..analytics.pdc import PdcPoint, PowerDurationCurve
from ..exceptions import InsufficientDataError
from .client import RemotePredictionClient, request_or_none
from .types import PredictionSource

logger = logging.getLogger(__name__)

MIN_RIDES = 5
MAX_SUPPORTING_EFFORTS = 5
SUPPORTING_EFFORT_MIN_SECS = 1200
# Predictions within this many percent of current FTP are not worth reporting
NOTIFY_DIFFERENCE_PERCENT = 3.0


@dataclass
class RideSummary:
    """Per-ride summary with the ride's own best efforts."""

    ride_id: str
    date: date
    duration_seconds: int
    avg_power: Optional[int] = None
    normalized_power: Optional[int] = None
    max_power: Optional[int] = None
    tss: Optional[float] = None
    pdc_points: List[PdcPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "ride_id": self.ride_id,
            "date": self.date.isoformat(),
            "duration_seconds": self.duration_seconds,
            "avg_power": self.avg_power,
            "normalized_power": self.normalized_power,
            "max_power": self.max_power,
            "tss": self.tss,
            "pdc_points": [p.to_dict() for p in self.pdc_points],
        }


@dataclass(frozen=True)
class SupportingEffort:
    ride_id: str
    duration_secs: int
    power_watts: int
    ride_date: date

    def to_dict(self) -> dict:
        return {
            "ride_id": self.ride_id,
            "duration_secs": self.duration_secs,
            "power_watts": self.power_watts,
            "ride_date": self.ride_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SupportingEffort":
        return cls(
            ride_id=str(data["ride_id"]),
            duration_secs=int(data["duration_secs"]),
            power_watts=int(data["power_watts"]),
            ride_date=date.fromisoformat(data["ride_date"]),
        )


@dataclass(frozen=True)
class FtpPredictionResult:
    predicted_ftp: int
    confidence: FtpConfidence
    method_used: FtpMethod
    supporting_efforts: List[SupportingEffort]
    differs_from_current: bool
    difference_percent: float
    source: PredictionSource

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "predicted_ftp": self.predicted_ftp,
            "confidence": self.confidence.value,
            "method_used": self.method_used.value,
            "supporting_efforts": [e.to_dict() for e in self.supporting_efforts],
            "differs_from_current": self.differs_from_current,
            "difference_percent": round(self.difference_percent, 1),
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict, source: PredictionSource = PredictionSource.REMOTE) -> "FtpPredictionResult":
        difference = float(data.get("difference_percent", 0.0))
        return cls(
            predicted_ftp=int(data["predicted_ftp"]),
            confidence=FtpConfidence(data["confidence"]),
            method_used=FtpMethod(data["method_used"]),
            supporting_efforts=[
                SupportingEffort.from_dict(e) for e in data.get("supporting_efforts", [])
            ],
            differs_from_current=bool(
                data.get("differs_from_current", abs(difference) > NOTIFY_DIFFERENCE_PERCENT)
            ),
            difference_percent=difference,
            source=source,
        )


def difference_percent(predicted_ftp: int, current_ftp: int) -> float:
    """Percent change from current FTP; 0 when no current FTP is set."""
    if current_ftp <= 0:
        return 0.0
    return (predicted_ftp - current_ftp) / current_ftp * 100.0


class FtpPredictor:
    """Predicts FTP from recent rides."""

    def __init__(
        self,
        client: Optional[RemotePredictionClient] = None,
        detector: Optional[FtpDetector] = None,
    ):
        self.client = client
        self.detector = detector or FtpDetector()

    async def predict(
        self,
        user_id: str,
        rides: Sequence[RideSummary],
        current_ftp: int,
    ) -> FtpPredictionResult:
        """
        Predict FTP, trying the remote service before the local detector.

        Raises:
            InsufficientDataError: Fewer than 5 rides, or no usable efforts
        """
        if len(rides) < MIN_RIDES:
            raise InsufficientDataError(
                count=len(rides),
                required=MIN_RIDES,
                message=f"Only {len(rides)} rides available, need at least {MIN_RIDES}",
                guidance="Complete more varied-intensity rides to enable FTP prediction.",
            )

        payload = {
            "user_id": user_id,
            "current_ftp": current_ftp,
            "rides": [r.to_dict() for r in rides],
        }
        remote = await request_or_none(
            self.client, "/ftp/predict", payload, FtpPredictionResult.from_dict
        )
        if remote is not None:
            return remote

        return self.predict_local(rides, current_ftp)

    def predict_local(self, rides: Sequence[RideSummary], current_ftp: int) -> FtpPredictionResult:
        """Merge ride efforts into one curve and run the FTP detector."""
        points = [p for ride in rides for p in ride.pdc_points]
        if not points:
            raise InsufficientDataError(
                count=0,
                message="No power duration curve data available",
                guidance="Record rides with consistent power efforts to build your power curve.",
            )

        estimate = self.detector.detect(PowerDurationCurve.from_points(points))
        if estimate is None:
            raise InsufficientDataError(
                count=len(points),
                message="Could not estimate FTP from available data",
                guidance="Record longer efforts (20+ minutes) at high intensity.",
            )

        # First qualifying effort per ride, in ride order
        supporting: List[SupportingEffort] = []
        for ride in rides:
            effort = next(
                (p for p in ride.pdc_points if p.duration_secs >= SUPPORTING_EFFORT_MIN_SECS),
                None,
            )
            if effort is not None:
                supporting.append(
                    SupportingEffort(ride.ride_id, effort.duration_secs, effort.power_watts, ride.date)
                )
            if len(supporting) == MAX_SUPPORTING_EFFORTS:
                break

        difference = difference_percent(estimate.ftp_watts, current_ftp)
        logger.debug(
            f"Local FTP prediction: {estimate.ftp_watts}W ({difference:+.1f}% vs {current_ftp}W)"
        )

        return FtpPredictionResult(
            predicted_ftp=estimate.ftp_watts,
            confidence=estimate.confidence,
            method_used=estimate.method,
            supporting_efforts=supporting,
            differs_from_current=abs(difference) > NOTIFY_DIFFERENCE_PERCENT,
            difference_percent=difference,
            source=PredictionSource.LOCAL_FALLBACK,
        )

    def should_notify(self, prediction: FtpPredictionResult, current_ftp: int) -> bool:
        """Whether the rider should be prompted to accept the new FTP."""
        return (
            prediction.differs_from_current
            and abs(prediction.difference_percent) > NOTIFY_DIFFERENCE_PERCENT
            and prediction.confidence != FtpConfidence.LOW
            and current_ftp > 0
        )
