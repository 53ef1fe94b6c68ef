"""
Data model (StormColumns)
=========================

The storm table itself stays a pandas DataFrame: every step of the report is a
group-by / sort / merge, and pandas does those directly.

What we model explicitly is the *schema*: which columns the pipeline consumes.
The loader maps whatever header the source file uses onto these canonical
names, so the rest of the code can rely on them.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class StormColumns:
    """Canonical column names used after loading."""
    event_type: str = "EVTYPE"
    fatalities: str = "FATALITIES"
    injuries: str = "INJURIES"
    property_damage: str = "PROPDMG"
    crop_damage: str = "CROPDMG"
    # optional, only used for the year range in the report
    begin_date: str = "BGN_DATE"
    # derived: property + crop damage
    total_damage: str = "TOTALDMG"

    def metrics(self) -> Tuple[str, str, str, str]:
        """The four summed metric columns, in report order."""
        return (self.fatalities, self.injuries, self.property_damage, self.crop_damage)


COLUMNS = StormColumns()
