"""Status update pushed to the tray and the settings window."""

from dataclasses import asdict, dataclass

from surftray.models.common import Color


@dataclass(frozen=True)
class StatusUpdate:
    color: Color
    label: str
    level: str
    wave_height: float | None
    period: float | None
    time: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["color"] = self.color.value
        data["waveHeight"] = data.pop("wave_height")
        return data
