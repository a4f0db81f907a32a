from __future__ import annotations

import pytest

SAMPLE_REPORT = """\
HOME ENERGY SCORE
This Home's Score 6 out of 10
ESTIMATED ENERGY COSTS for this home $2,150 PER YEAR
LOCATION
123 Main St
Portland, OR 97201
YEAR BUILT 1978
HEATED FLOOR AREA 1,850 sq. ft.
NUMBER OF BEDROOMS 3
THIS HOME'S CARBON FOOTPRINT
Tons of CO2 per year
7.2 This Home
Estimated solar generation: 5,400kWh per year


PRIORITY ENERGY IMPROVEMENTS
FEATURE TODAY'S CONDITION RECOMMENDED IMPROVEMENTS
Air Conditioner 8.0 SEERWhen replacing, install an ENERGY STAR unit of 16 SEER or higher
Envelope/Air sealing Not professionally air sealed Professionally air seal
Heating equipment Natural gas furnace 80% AFUE When replacing, install an ENERGY STAR furnace
Water Heater Natural gas storage 0.58 EF When replacing, install a heat pump water heater
1. To achieve the score shown, complete all priority improvements.
ADDITIONAL ENERGY RECOMMENDATIONS
FEATURE TODAY'S CONDITION RECOMMENDED IMPROVEMENTS
Attic insulation Ceiling insulated to R-19Insulate to R-49
Basement wall insulation Uninsulated Insulate to R-11
Cathedral Ceiling/Roof Roof deck R-11 Insulate to R-30
Duct insulation Uninsulated ducts Insulate to R-6
Duct sealing Leaky ducts Seal ducts to reduce leakage
Floor insulation Floor over crawlspace R-0 Insulate to R-30
Foundation wall insulation Concrete block R-0 Insulate to R-10
Knee Wall insulation Uninsulated knee walls Insulate to R-13
Skylights Double-pane, clear Replace with double-pane low-e units
Wall insulation Uninsulated Insulate to R-13
Windows Single-pane, wood frame Upgrade to ENERGY STAR units
Solar PV Capacity of 5.4kW in DC Install a solar electric system
2. Today's Condition represents what the assessor observed.
"""


@pytest.fixture()
def sample_report() -> str:
    return SAMPLE_REPORT
