"""
ESG Framework Requirement Catalog

Static reference data: one entry per disclosure requirement per framework
version. Loaded once at import, validated, never mutated.

Each requirement has:
- framework_id / version: which standard and edition it belongs to
- standard_id: topic standard or pillar inside the framework
- requirement_id: the disclosure code (e.g. "GRI-305-1")
- category: environmental / social / governance bucket used for scoring
- pillar: the framework's own grouping where it differs from the category
  (TCFD and ISSB pillars)
- required_metric_keys: internal metric keys that evidence the requirement
- match: "all" (every key needed) or "any" (one indicator is enough; used by
  the mining and jurisdiction catalogs whose requirements list alternative
  indicators)
- materiality_level: HIGH / MEDIUM / LOW / NOT_APPLICABLE

Metric keys submitted under another spelling are resolved through explicit
alias tables, never by guessing: METRIC_ALIASES applies to every framework,
FRAMEWORK_ALIASES to one framework only. Separator- and case-insensitive
spellings of the catalog's own keys ("scope1_emissions", "tailings-volume")
are generated into the table once, at import.
"""

from esg_compliance.exceptions import ReferenceDataError
from esg_compliance.records import CATEGORIES
from esg_compliance.thresholds import GRI_COMPLETENESS_REQUIREMENTS, METRIC_UNITS, VALIDATION_THRESHOLDS

MATERIALITY_LEVELS = ("HIGH", "MEDIUM", "LOW", "NOT_APPLICABLE")
MATCH_MODES = ("all", "any")

FRAMEWORKS = {
    "GRI": {"name": "GRI Standards", "version": "2021",
            "description": "Comprehensive impact reporting across economic, environmental and social topics."},
    "SASB": {"name": "SASB Standards (Software & IT Services)", "version": "2023-12",
             "description": "Industry-specific, financially material sustainability disclosures."},
    "TCFD": {"name": "Task Force on Climate-related Financial Disclosures", "version": "2017",
             "description": "Climate governance, strategy, risk management, metrics and targets."},
    "BRSR": {"name": "SEBI Business Responsibility and Sustainability Report", "version": "2023",
             "description": "Mandatory ESG disclosure for listed entities in India, by NGRBC principle."},
    "ICMM": {"name": "International Council on Mining and Metals", "version": "2022",
             "description": "Mining Principles for responsible mining performance."},
    "EITI": {"name": "Extractive Industries Transparency Initiative", "version": "2023",
             "description": "Transparency standard for the extractive sector."},
    "ISSB_S1": {"name": "IFRS S1 General Sustainability Disclosures", "version": "2023",
                "description": "Sustainability-related financial information."},
    "ISSB_S2": {"name": "IFRS S2 Climate-related Disclosures", "version": "2023",
                "description": "Climate-related financial disclosures based on TCFD."},
    "ZIMBABWE_EMA": {"name": "Environmental Management Act (Chapter 20:27)", "version": "2002",
                     "description": "Zimbabwe environmental regulations."},
    "ZIMBABWE_MMA": {"name": "Mines and Minerals Act (Chapter 21:05)", "version": "1961 (amended)",
                     "description": "Zimbabwe mining regulations."},
    "ZSE_LISTING": {"name": "Zimbabwe Stock Exchange ESG Requirements", "version": "2019",
                    "description": "ZSE listing and disclosure requirements."},
}


def _req(framework_id, standard_id, requirement_id, title, category, keys,
         materiality="MEDIUM", pillar=None, match="all"):
    return {
        "framework_id": framework_id,
        "version": FRAMEWORKS[framework_id]["version"],
        "standard_id": standard_id,
        "requirement_id": requirement_id,
        "title": title,
        "category": category,
        "pillar": pillar,
        "required_metric_keys": frozenset(keys),
        "match": match,
        "materiality_level": materiality,
    }


FRAMEWORK_REQUIREMENTS = (
    # =========================================================================
    # GRI
    # =========================================================================
    _req("GRI", "GRI-302", "GRI-302-1", "Energy consumption within the organization",
         "environmental", ["energyConsumption"], "HIGH"),
    _req("GRI", "GRI-303", "GRI-303-3", "Water withdrawal",
         "environmental", ["waterWithdrawal"]),
    _req("GRI", "GRI-305", "GRI-305-1", "Direct (Scope 1) GHG emissions",
         "environmental", ["scope1Emissions"], "HIGH"),
    _req("GRI", "GRI-305", "GRI-305-2", "Energy indirect (Scope 2) GHG emissions",
         "environmental", ["scope2Emissions"], "HIGH"),
    _req("GRI", "GRI-306", "GRI-306-3", "Waste generated",
         "environmental", ["wasteGenerated"]),
    _req("GRI", "GRI-2", "GRI-2-7", "Employees",
         "social", ["totalEmployees"]),
    _req("GRI", "GRI-405", "GRI-405-1", "Diversity of governance bodies and employees",
         "social", ["femaleEmployeesPercentage"]),
    _req("GRI", "GRI-404", "GRI-404-1", "Average hours of training per year per employee",
         "social", ["trainingHoursPerEmployee"], "LOW"),
    _req("GRI", "GRI-403", "GRI-403-9", "Work-related injuries",
         "social", ["lostTimeInjuryRate"], "HIGH"),
    _req("GRI", "GRI-2", "GRI-2-9", "Governance structure and composition",
         "governance", ["boardSize", "independentDirectorsPercentage"], "HIGH"),
    _req("GRI", "GRI-205", "GRI-205-2", "Communication and training about anti-corruption policies and procedures",
         "governance", ["ethicsTrainingCompletion"]),
    _req("GRI", "GRI-205", "GRI-205-3", "Confirmed incidents of corruption and actions taken",
         "governance", ["corruptionIncidents"], "HIGH"),

    # =========================================================================
    # SASB (Software & IT Services)
    # =========================================================================
    _req("SASB", "Energy Management", "TC-SI-130a.1", "Total energy consumed and percentage renewable",
         "environmental", ["energyConsumption", "renewableEnergyPercentage"], "HIGH"),
    _req("SASB", "Water Management", "TC-SI-130a.2", "Total water withdrawn",
         "environmental", ["waterWithdrawal"]),
    _req("SASB", "GHG Emissions", "TC-SI-110a.1", "Gross global Scope 1 emissions",
         "environmental", ["scope1Emissions"]),
    _req("SASB", "Employee Engagement, Diversity & Inclusion", "TC-SI-330a.3",
         "Percentage of gender representation for management and employees",
         "social", ["femaleEmployeesPercentage"], "HIGH"),
    _req("SASB", "Customer Privacy", "TC-SI-220a.1", "Policies relating to behavioral advertising and user privacy",
         "social", ["dataPrivacy"], "HIGH"),
    _req("SASB", "Customer Welfare", "TC-SI-240a.1", "Customer satisfaction measurement",
         "social", ["customerSatisfaction"], "LOW"),
    _req("SASB", "Data Security", "TC-SI-230a.1", "Number of data breaches",
         "governance", ["dataBreaches"], "HIGH"),
    _req("SASB", "Business Ethics", "TC-SI-520a.1", "Monetary losses from legal proceedings on business ethics",
         "governance", ["businessEthics"]),
    _req("SASB", "Systemic Risk Management", "TC-SI-550a.1", "Performance issues and service disruptions",
         "governance", ["riskManagement"]),

    # =========================================================================
    # TCFD (pillars mapped onto scoring categories; no social requirements)
    # =========================================================================
    _req("TCFD", "Governance", "TCFD-GOV-a", "Board oversight of climate-related risks and opportunities",
         "governance", ["boardOversight"], "HIGH", pillar="governance"),
    _req("TCFD", "Governance", "TCFD-GOV-b", "Management's role in assessing and managing climate-related risks",
         "governance", ["managementRole"], pillar="governance"),
    _req("TCFD", "Strategy", "TCFD-STR-a", "Climate-related risks and opportunities identified",
         "environmental", ["climateRisks"], "HIGH", pillar="strategy"),
    _req("TCFD", "Strategy", "TCFD-STR-b", "Impact on business, strategy and financial planning",
         "environmental", ["businessImpact"], pillar="strategy"),
    _req("TCFD", "Risk Management", "TCFD-RM-a", "Processes for identifying and assessing climate-related risks",
         "governance", ["riskIdentification"], pillar="risk_management"),
    _req("TCFD", "Risk Management", "TCFD-RM-b", "Processes for managing climate-related risks",
         "governance", ["riskAssessment"], pillar="risk_management"),
    _req("TCFD", "Metrics and Targets", "TCFD-MT-b", "Scope 1 and Scope 2 GHG emissions",
         "environmental", ["scope1Emissions", "scope2Emissions"], "HIGH", pillar="metrics_targets"),
    _req("TCFD", "Metrics and Targets", "TCFD-MT-b3", "Scope 3 GHG emissions, if appropriate",
         "environmental", ["scope3Emissions"], "LOW", pillar="metrics_targets"),

    # =========================================================================
    # BRSR (NGRBC principles)
    # =========================================================================
    _req("BRSR", "Principle 6", "BRSR-P6-E1", "Energy consumption and energy intensity",
         "environmental", ["energyConsumption"], "HIGH"),
    _req("BRSR", "Principle 6", "BRSR-P6-E7", "Scope 1 and Scope 2 emissions and intensity",
         "environmental", ["scope1Emissions", "scope2Emissions"], "HIGH"),
    _req("BRSR", "Principle 6", "BRSR-P6-E3", "Water withdrawal by source",
         "environmental", ["waterWithdrawal"]),
    _req("BRSR", "Principle 6", "BRSR-P6-E9", "Waste generated and management",
         "environmental", ["wasteGenerated"]),
    _req("BRSR", "Principle 3", "BRSR-P3-E1", "Measures for the well-being of employees",
         "social", ["employeeWellbeing"]),
    _req("BRSR", "Principle 5", "BRSR-A-18", "Participation and inclusion of women",
         "social", ["femaleEmployeesPercentage"]),
    _req("BRSR", "Principle 8", "BRSR-P8-L4", "Community investment and CSR projects",
         "social", ["communityInvestment"], "LOW"),
    _req("BRSR", "Principle 1", "BRSR-A-21", "Board composition and independence",
         "governance", ["boardSize", "independentDirectorsPercentage"], "HIGH"),
    _req("BRSR", "Principle 1", "BRSR-P1-E1", "Ethics and anti-corruption training coverage",
         "governance", ["ethicsTrainingCompletion"]),
    _req("BRSR", "Principle 4", "BRSR-P4-E2", "Stakeholder engagement processes",
         "governance", ["stakeholderEngagement"], "LOW"),

    # =========================================================================
    # ICMM Mining Principles (any listed indicator evidences the principle)
    # =========================================================================
    _req("ICMM", "Principles", "ICMM-1", "Ethical Business",
         "governance", ["antiCorruption", "transparency", "humanRights"], "HIGH", match="any"),
    _req("ICMM", "Principles", "ICMM-2", "Decision Making",
         "governance", ["stakeholderEngagement", "impactAssessment"], match="any"),
    _req("ICMM", "Principles", "ICMM-3", "Human Rights",
         "social", ["indigenousRights", "resettlement", "security"], "HIGH", match="any"),
    _req("ICMM", "Principles", "ICMM-4", "Risk Management",
         "social", ["healthSafety", "emergencyResponse"], "HIGH", match="any"),
    _req("ICMM", "Principles", "ICMM-5", "Environmental Performance",
         "environmental", ["biodiversity", "water", "tailings"], "HIGH", match="any"),
    _req("ICMM", "Principles", "ICMM-6", "Conservation",
         "environmental", ["landRehabilitation", "mineClosure"], match="any"),
    _req("ICMM", "Principles", "ICMM-7", "Biodiversity",
         "environmental", ["protectedAreas", "speciesConservation"], match="any"),
    _req("ICMM", "Principles", "ICMM-8", "Responsible Production",
         "environmental", ["productStewardship", "supplyChain"], match="any"),
    _req("ICMM", "Principles", "ICMM-9", "Social Performance",
         "social", ["localEmployment", "communityDevelopment"], match="any"),
    _req("ICMM", "Principles", "ICMM-10", "Stakeholder Engagement",
         "social", ["consultation", "grievanceMechanism"], match="any"),

    # =========================================================================
    # EITI
    # =========================================================================
    _req("EITI", "Requirements", "EITI-1", "Legal Framework",
         "governance", ["miningLicenses", "contracts", "beneficialOwnership"], "HIGH", match="any"),
    _req("EITI", "Requirements", "EITI-2", "Production Data",
         "governance", ["productionVolumes", "exportData"], match="any"),
    _req("EITI", "Requirements", "EITI-3", "Revenue Collection",
         "governance", ["taxes", "royalties", "dividends"], "HIGH", match="any"),
    _req("EITI", "Requirements", "EITI-4", "Revenue Allocation",
         "governance", ["governmentRevenue", "subnationalTransfers"], match="any"),
    _req("EITI", "Requirements", "EITI-5", "Social Expenditure",
         "social", ["communityPayments", "infrastructure"], match="any"),
    _req("EITI", "Requirements", "EITI-6", "State Participation",
         "governance", ["stateOwnedEnterprises", "quasiFiscal"], "LOW", match="any"),

    # =========================================================================
    # IFRS S1 / S2
    # =========================================================================
    _req("ISSB_S1", "Governance", "S1-GOV", "Governance",
         "governance", ["boardOversight", "managementRole", "controls"], "HIGH", pillar="governance", match="any"),
    _req("ISSB_S1", "Strategy", "S1-STRAT", "Strategy",
         "governance", ["risksOpportunities", "businessModel", "valueChain"], pillar="strategy", match="any"),
    _req("ISSB_S1", "Risk Management", "S1-RISK", "Risk Management",
         "governance", ["riskIdentification", "riskAssessment", "riskMitigation"], pillar="risk_management", match="any"),
    _req("ISSB_S1", "Metrics & Targets", "S1-METRICS", "Metrics & Targets",
         "environmental", ["performanceMetrics", "targets", "trends"], pillar="metrics_targets", match="any"),
    _req("ISSB_S2", "Governance", "S2-GOV", "Climate Governance",
         "governance", ["climateOversight", "managementResponsibility"], "HIGH", pillar="governance", match="any"),
    _req("ISSB_S2", "Strategy", "S2-STRAT", "Climate Strategy",
         "environmental", ["climateRisks", "opportunities", "resilience", "transitionPlan"], "HIGH",
         pillar="strategy", match="any"),
    _req("ISSB_S2", "Risk Management", "S2-RISK", "Climate Risk Management",
         "governance", ["climateRiskIdentification", "integration"], pillar="risk_management", match="any"),
    _req("ISSB_S2", "Metrics & Targets", "S2-METRICS", "Climate Metrics & Targets",
         "environmental", ["scope1Emissions", "climateTargets", "scenarioAnalysis"], "HIGH",
         pillar="metrics_targets", match="any"),

    # =========================================================================
    # Zimbabwe regulations and ZSE listing
    # =========================================================================
    _req("ZIMBABWE_EMA", "EMA", "EMA-1", "EIA Certificate",
         "environmental", ["environmentalImpactAssessment", "eiaApproval"], "HIGH", match="any"),
    _req("ZIMBABWE_EMA", "EMA", "EMA-2", "Effluent Standards",
         "environmental", ["waterDischarge", "effluentQuality"], "HIGH", match="any"),
    _req("ZIMBABWE_EMA", "EMA", "EMA-3", "Air Quality",
         "environmental", ["emissionsMonitoring", "airQualityStandards"], match="any"),
    _req("ZIMBABWE_EMA", "EMA", "EMA-4", "Waste Management",
         "environmental", ["hazardousWaste", "wasteDisposal"], match="any"),
    _req("ZIMBABWE_EMA", "EMA", "EMA-5", "Environmental Levy",
         "governance", ["levyPayment", "complianceCertificate"], "LOW", match="any"),
    _req("ZIMBABWE_MMA", "MMA", "MMA-1", "Mining Title",
         "governance", ["specialGrant", "miningLease", "claim"], "HIGH", match="any"),
    _req("ZIMBABWE_MMA", "MMA", "MMA-2", "Royalties",
         "governance", ["royaltyPayment", "productionReturns"], match="any"),
    _req("ZIMBABWE_MMA", "MMA", "MMA-3", "Mine Safety",
         "social", ["safetyCertificate", "accidentReporting"], "HIGH", match="any"),
    _req("ZIMBABWE_MMA", "MMA", "MMA-4", "Mine Closure",
         "environmental", ["closurePlan", "rehabilitationBond"], match="any"),
    _req("ZIMBABWE_MMA", "MMA", "MMA-5", "Local Content",
         "social", ["localEmployment", "localProcurement"], match="any"),
    _req("ZSE_LISTING", "Listing Rules", "ZSE-1", "Annual Reporting",
         "governance", ["financialStatements", "esgDisclosure"], "HIGH", match="any"),
    _req("ZSE_LISTING", "Listing Rules", "ZSE-2", "Corporate Governance",
         "governance", ["boardComposition", "auditCommittee"], match="any"),
    _req("ZSE_LISTING", "Listing Rules", "ZSE-3", "Continuous Disclosure",
         "governance", ["materialEvents", "priceSensitiveInfo"], match="any"),
)

# Reporting codes a metric feeds, for frameworks whose codes are not one per
# requirement (a metric can appear in disclosures it does not fully satisfy).
METRIC_REPORTING_CODES = {
    "GRI": {
        "scope1Emissions": ["GRI-305-1"],
        "scope2Emissions": ["GRI-305-2"],
        "scope3Emissions": ["GRI-305-3"],
        "energyConsumption": ["GRI-302-1"],
        "renewableEnergyPercentage": ["GRI-302-1"],
        "waterWithdrawal": ["GRI-303-3"],
        "waterDischarge": ["GRI-303-4"],
        "wasteGenerated": ["GRI-306-3"],
        "wasteRecycled": ["GRI-306-4"],
        "materialsUsed": ["GRI-301-1"],
        "totalEmployees": ["GRI-2-7"],
        "newHires": ["GRI-401-1"],
        "employeeTurnoverRate": ["GRI-401-1"],
        "femaleEmployeesPercentage": ["GRI-405-1"],
        "femaleDirectorsPercentage": ["GRI-405-1"],
        "trainingHoursPerEmployee": ["GRI-404-1"],
        "lostTimeInjuryRate": ["GRI-403-9"],
        "fatalityRate": ["GRI-403-9"],
        "boardSize": ["GRI-2-9"],
        "independentDirectorsPercentage": ["GRI-2-9"],
        "ethicsTrainingCompletion": ["GRI-205-2"],
        "corruptionIncidents": ["GRI-205-3"],
        "legalActions": ["GRI-206-1"],
    },
    "SASB": {
        "dataBreaches": ["TC-SI-230a.1"],
        "dataPrivacy": ["TC-SI-220a.1"],
        "energyConsumption": ["TC-SI-130a.1"],
        "renewableEnergyPercentage": ["TC-SI-130a.1"],
        "waterWithdrawal": ["TC-SI-130a.2"],
        "scope1Emissions": ["TC-SI-110a.1"],
        "femaleEmployeesPercentage": ["TC-SI-330a.3"],
        "esgIntegration": ["FN-IB-410a.1"],
        "climateRisk": ["FN-CB-450a.1"],
        "financialInclusion": ["FN-CB-240a.1"],
        "clinicalTrialSafety": ["HC-BP-210a.1"],
        "drugPricing": ["HC-BP-240a.1"],
        "productRecalls": ["HC-BP-250a.1"],
    },
}

# Alternative spellings used by data-entry forms, imports and older reports.
METRIC_ALIASES = {
    "scope_1_emissions": "scope1Emissions",
    "scope_2_emissions": "scope2Emissions",
    "scope_3_emissions": "scope3Emissions",
    "renewable_energy": "renewableEnergyPercentage",
    "water_usage": "waterWithdrawal",
    "female_employees": "femaleEmployeesPercentage",
    "training_hours": "trainingHoursPerEmployee",
    "lost_time_injuries": "lostTimeInjuryRate",
    "ltir": "lostTimeInjuryRate",
    "employee_turnover": "employeeTurnoverRate",
    "independent_directors": "independentDirectorsPercentage",
    "female_directors": "femaleDirectorsPercentage",
    "board_diversity": "femaleDirectorsPercentage",
    "ethics_training": "ethicsTrainingCompletion",
    "anti_corruption_training": "ethicsTrainingCompletion",
    "customer_privacy": "dataPrivacy",
}

FRAMEWORK_ALIASES = {
    "SASB": {
        "ghg_emissions": "scope1Emissions",
        "employee_diversity": "femaleEmployeesPercentage",
        "renewable_energy": "renewableEnergyPercentage",
    },
    "BRSR": {
        "ghg_emissions": "scope1Emissions",
        "waste_management": "wasteGenerated",
        "diversity_inclusion": "femaleEmployeesPercentage",
        "ethics_compliance": "ethicsTrainingCompletion",
    },
    "ICMM": {
        "anti_corruption": "antiCorruption",
        "health_safety": "healthSafety",
    },
    "ISSB_S2": {
        "ghg_emissions": "scope1Emissions",
    },
}

FRAMEWORK_GUIDANCE = {
    "GRI": {
        "general": "GRI Standards provide a comprehensive framework for sustainability reporting. Focus on materiality assessment and stakeholder engagement.",
        "environmental": "Report on energy, emissions, water, waste, and biodiversity impacts. Include both direct and indirect impacts.",
        "social": "Cover employment, health & safety, training, diversity, human rights, and community impacts.",
        "governance": "Address governance structure, ethics, anti-corruption, and stakeholder engagement processes.",
    },
    "SASB": {
        "general": "SASB focuses on financially material sustainability topics specific to your industry. Identify your industry classification first.",
        "environmental": "Report on industry-specific environmental metrics that affect financial performance.",
        "social": "Focus on social factors that create financial risks or opportunities in your sector.",
        "governance": "Address governance practices that impact long-term value creation.",
    },
    "TCFD": {
        "general": "Disclose climate-related governance, strategy, risk management, and metrics and targets.",
        "environmental": "Quantify Scope 1, 2 and material Scope 3 emissions and describe climate scenario impacts.",
        "governance": "Describe board oversight and management's role in climate-related risks.",
    },
    "BRSR": {
        "general": "BRSR reports performance against the nine NGRBC principles, with essential and leadership indicators.",
        "environmental": "Principle 6: energy, emissions, water and waste with intensity ratios.",
        "social": "Principles 3, 5 and 8: employee well-being, human rights and inclusive growth.",
        "governance": "Principles 1 and 4: ethics, transparency and stakeholder responsiveness.",
    },
}


def _fold(key):
    """Case- and separator-insensitive form of a metric key."""
    return "".join(ch for ch in str(key).strip().lower() if ch not in "_- ")


def _known_metric_keys():
    keys = set(METRIC_UNITS)
    for rules in VALIDATION_THRESHOLDS.values():
        keys.update(rules)
    for fields in GRI_COMPLETENESS_REQUIREMENTS.values():
        keys.update(fields.get("required", []))
        keys.update(fields.get("recommended", []))
    for req in FRAMEWORK_REQUIREMENTS:
        keys.update(req["required_metric_keys"])
    for codes in METRIC_REPORTING_CODES.values():
        keys.update(codes)
    return frozenset(keys)


KNOWN_METRIC_KEYS = _known_metric_keys()


def _build_alias_index(aliases):
    index = {_fold(k): k for k in KNOWN_METRIC_KEYS}
    for alias, target in aliases.items():
        index[_fold(alias)] = target
    return index


_ALIAS_INDEX = _build_alias_index(METRIC_ALIASES)
_FRAMEWORK_ALIAS_INDEX = {
    fid: {_fold(alias): target for alias, target in aliases.items()}
    for fid, aliases in FRAMEWORK_ALIASES.items()
}


def canonical_metric_key(key, framework_id=None):
    """Resolve a submitted metric key to the catalog's spelling.

    Exact catalog keys pass through. Other spellings resolve through the
    framework's alias table first, then the global one. Unknown keys come
    back unchanged and will not satisfy any requirement.
    """
    if key in KNOWN_METRIC_KEYS:
        return key
    folded = _fold(key)
    if framework_id:
        target = _FRAMEWORK_ALIAS_INDEX.get(framework_id.upper(), {}).get(folded)
        if target:
            return target
    return _ALIAS_INDEX.get(folded, key)


def get_framework(framework_id):
    """Return framework metadata or raise ReferenceDataError."""
    fid = str(framework_id or "").strip().upper()
    if fid not in FRAMEWORKS:
        raise ReferenceDataError(f"Unknown framework: {framework_id!r}")
    return fid, FRAMEWORKS[fid]


def get_requirements(framework_id):
    """All requirements for one framework, in catalog order."""
    fid, _ = get_framework(framework_id)
    return [r for r in FRAMEWORK_REQUIREMENTS if r["framework_id"] == fid]


def get_requirements_by_category(framework_id):
    """Group a framework's requirements by scoring category."""
    grouped = {c: [] for c in CATEGORIES}
    for req in get_requirements(framework_id):
        grouped[req["category"]].append(req)
    return grouped


def get_requirement_by_id(requirement_id):
    """Look up a single requirement by its disclosure code."""
    for req in FRAMEWORK_REQUIREMENTS:
        if req["requirement_id"] == requirement_id:
            return req
    return None


def requirement_to_dict(req):
    """JSON-friendly copy of a catalog requirement."""
    data = dict(req)
    data["required_metric_keys"] = sorted(req["required_metric_keys"])
    return data


def validate_catalog():
    """Check the static catalog. Raises ReferenceDataError on the first problem."""
    seen = set()
    counts = {fid: 0 for fid in FRAMEWORKS}
    for req in FRAMEWORK_REQUIREMENTS:
        fid = req["framework_id"]
        rid = req["requirement_id"]
        if fid not in FRAMEWORKS:
            raise ReferenceDataError(f"{rid}: unknown framework {fid}")
        if (fid, rid) in seen:
            raise ReferenceDataError(f"{fid}: duplicate requirement {rid}")
        if req["category"] not in CATEGORIES:
            raise ReferenceDataError(f"{rid}: invalid category {req['category']!r}")
        if req["materiality_level"] not in MATERIALITY_LEVELS:
            raise ReferenceDataError(f"{rid}: invalid materiality {req['materiality_level']!r}")
        if req["match"] not in MATCH_MODES:
            raise ReferenceDataError(f"{rid}: invalid match mode {req['match']!r}")
        if not req["required_metric_keys"]:
            raise ReferenceDataError(f"{rid}: no required metric keys")
        seen.add((fid, rid))
        counts[fid] += 1

    empty = [fid for fid, n in counts.items() if n == 0]
    if empty:
        raise ReferenceDataError(f"Frameworks without requirements: {', '.join(empty)}")

    folded = {}
    for key in KNOWN_METRIC_KEYS:
        other = folded.setdefault(_fold(key), key)
        if other != key:
            raise ReferenceDataError(f"Metric keys {other!r} and {key!r} are indistinguishable")

    for fid, aliases in [(None, METRIC_ALIASES)] + list(FRAMEWORK_ALIASES.items()):
        if fid is not None and fid not in FRAMEWORKS:
            raise ReferenceDataError(f"Alias table for unknown framework {fid}")
        for alias, target in aliases.items():
            if target not in KNOWN_METRIC_KEYS:
                raise ReferenceDataError(f"Alias {alias!r} points at unknown metric {target!r}")

    return counts


CATALOG_COUNTS = validate_catalog()
