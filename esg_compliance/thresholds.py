"""
ESG Validation Rule Tables

Threshold rules, keyed by category then metric. Each rule has:
- min / max: plausible domain of the value. Outside it the input is treated
  as corrupt (error severity). Comparison is strict, so a value equal to
  max passes.
- warning: either a scalar upper bound, or {"low": x, "high": y} with
  either side optional (warning severity).
- critical: value at or above it is material on its own (critical
  severity). Used for zero-tolerance safety and ethics metrics.

Completeness requirements list, per GRI standard, the fields a disclosure
needs (required) and the ones that strengthen it (recommended). Field
names are looked up at the top level of a submission first (company
metadata), then inside each category block.

Sources:
- GRI Universal Standards 2021 (GRI 2) and Topic Standards 302, 303, 305,
  306, 403, 405
- Platform data-entry rule set for environmental, social and governance
  forms
"""

VALIDATION_THRESHOLDS = {
    "environmental": {
        "scope1Emissions": {"min": 0, "max": 1000000, "warning": 500000},
        "scope2Emissions": {"min": 0, "max": 1000000, "warning": 500000},
        "scope3Emissions": {"min": 0, "max": 5000000, "warning": 2000000},
        "energyConsumption": {"min": 0, "max": 10000000, "warning": 5000000},
        "waterWithdrawal": {"min": 0, "max": 10000000, "warning": 5000000},
        "wasteGenerated": {"min": 0, "max": 100000, "warning": 50000},
    },
    "social": {
        "totalEmployees": {"min": 1, "max": 1000000, "warning": 10000},
        "femaleEmployeesPercentage": {"min": 0, "max": 100, "warning": {"low": 20, "high": 80}},
        "lostTimeInjuryRate": {"min": 0, "max": 100, "warning": 5},
        "fatalityRate": {"min": 0, "max": 10, "critical": 1},
        "employeeTurnoverRate": {"min": 0, "max": 100, "warning": 30},
    },
    "governance": {
        "boardSize": {"min": 3, "max": 30, "warning": {"low": 5, "high": 20}},
        "independentDirectorsPercentage": {"min": 0, "max": 100, "warning": {"low": 33}},
        "femaleDirectorsPercentage": {"min": 0, "max": 100, "warning": {"low": 30}},
        "corruptionIncidents": {"min": 0, "max": 1000, "critical": 1},
    },
}

GRI_COMPLETENESS_REQUIREMENTS = {
    "GRI-2": {
        "required": ["company_name", "sector", "region", "reporting_year"],
        "recommended": ["boardSize", "independentDirectorsPercentage"],
    },
    "GRI-302": {
        "required": ["energyConsumption"],
        "recommended": ["renewableEnergyPercentage"],
    },
    "GRI-303": {
        "required": ["waterWithdrawal"],
        "recommended": ["waterDischarge"],
    },
    "GRI-305": {
        "required": ["scope1Emissions", "scope2Emissions"],
        "recommended": ["scope3Emissions"],
    },
    "GRI-306": {
        "required": ["wasteGenerated"],
        "recommended": [],
    },
    "GRI-403": {
        "required": ["lostTimeInjuryRate"],
        "recommended": ["fatalityRate", "safetyTrainingHours"],
    },
    "GRI-405": {
        "required": ["femaleEmployeesPercentage"],
        "recommended": ["femaleDirectorsPercentage"],
    },
}

# Default units for metrics submitted without one
METRIC_UNITS = {
    "scope1Emissions": "tCO2e",
    "scope2Emissions": "tCO2e",
    "scope3Emissions": "tCO2e",
    "energyConsumption": "GJ",
    "renewableEnergyPercentage": "%",
    "waterWithdrawal": "m3",
    "waterDischarge": "m3",
    "wasteGenerated": "t",
    "wasteRecycled": "t",
    "totalEmployees": "count",
    "femaleEmployeesPercentage": "%",
    "trainingHoursPerEmployee": "hours",
    "lostTimeInjuryRate": "per 1M hours",
    "fatalityRate": "per 1M hours",
    "employeeTurnoverRate": "%",
    "safetyTrainingHours": "hours",
    "communityInvestment": "USD",
    "boardSize": "count",
    "independentDirectorsPercentage": "%",
    "femaleDirectorsPercentage": "%",
    "ethicsTrainingCompletion": "%",
    "corruptionIncidents": "count",
    "dataBreaches": "count",
}

SEVERITY_LEVELS = ("info", "warning", "error", "critical")
