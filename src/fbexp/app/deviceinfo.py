"""What a session has learned about the device."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DeviceInfo:
    """Variables read with getvar and the last staged download."""

    variables: dict[str, str] = field(default_factory=dict)
    downloaded: int | None = None

    def format(self) -> str:
        lines = [f"  {name:24s} {value}" for name, value in sorted(self.variables.items())]
        if self.downloaded is not None:
            lines.append(f"  {'(downloaded)':24s} {self.downloaded} bytes")
        return "\n".join(lines) if lines else "  (nothing collected)"
