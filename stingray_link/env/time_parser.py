import re
from datetime import timedelta


class TimeParser:
    def __init__(self) -> None:
        self._units = {
            "ms": "milliseconds",
            "s": "seconds",
            "m": "minutes",
            "h": "hours",
            "d": "days",
            "w": "weeks",
        }

    def parse(self, time_amount: str | int | float) -> float:
        if isinstance(time_amount, (int, float)):
            return float(time_amount)

        durations: dict[str, float] = {}
        for match in re.finditer(
            r"(?P<val>\d+(\.\d+)?)\s*(?P<unit>ms|[smhdw]?)",
            time_amount,
            flags=re.I,
        ):
            unit = self._units.get(
                match.group("unit").lower(),
                "seconds",
            )
            durations[unit] = durations.get(unit, 0.0) + float(match.group("val"))

        return timedelta(**durations).total_seconds()
