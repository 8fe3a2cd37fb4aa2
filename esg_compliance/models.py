from datetime import datetime, timezone

from esg_compliance import db


class CompanyProfile(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(256), nullable=False, default="")
    sector = db.Column(db.String(64), default="")
    region = db.Column(db.String(64), default="")
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self):
        return {
            "company_id": self.company_id,
            "company_name": self.name,
            "sector": self.sector,
            "region": self.region,
        }


class MetricEntry(db.Model):
    """One submitted metric value. Rows are never updated; a resubmission adds a row."""
    __tablename__ = "metric_entries"
    __table_args__ = (
        db.Index("ix_metric_entries_company_year", "company_id", "reporting_year"),
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False)
    reporting_year = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(20), nullable=False)
    # Category: environmental, social, governance
    metric_key = db.Column(db.String(100), nullable=False)
    value_number = db.Column(db.Float, nullable=True)
    value_text = db.Column(db.Text, nullable=True)
    unit = db.Column(db.String(32), default="")
    verified = db.Column(db.Boolean, default=False)
    source = db.Column(db.String(20), default="api")
    # Source: api, import
    submitted_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    @classmethod
    def from_entry(cls, entry, source="api"):
        value = entry.get("value")
        number = value if isinstance(value, (int, float)) and not isinstance(value, bool) else None
        return cls(
            company_id=str(entry["company_id"]),
            reporting_year=entry["reporting_year"],
            category=entry["category"],
            metric_key=entry["metric_key"],
            value_number=number,
            value_text=None if number is not None or value is None else str(value),
            unit=entry.get("unit", ""),
            verified=bool(entry.get("verified")),
            source=source,
        )

    @property
    def value(self):
        return self.value_number if self.value_number is not None else self.value_text

    def to_entry(self):
        return {
            "company_id": self.company_id,
            "reporting_year": self.reporting_year,
            "category": self.category,
            "metric_key": self.metric_key,
            "value": self.value,
            "unit": self.unit or "",
            "verified": bool(self.verified),
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }


class WasteRecord(db.Model):
    __tablename__ = "waste_records"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False, index=True)
    reporting_year = db.Column(db.Integer, nullable=False)
    waste_type = db.Column(db.String(64), default="")
    quantity = db.Column(db.Float, nullable=True)
    recycling_rate = db.Column(db.Float, nullable=True)

    def to_dict(self):
        return {"waste_type": self.waste_type, "quantity": self.quantity, "recycling_rate": self.recycling_rate}


class AirQualityRecord(db.Model):
    __tablename__ = "air_quality_records"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False, index=True)
    reporting_year = db.Column(db.Integer, nullable=False)
    pollutant = db.Column(db.String(64), default="")
    measured_value = db.Column(db.Float, nullable=True)
    compliance_status = db.Column(db.String(20), default="compliant")
    # Status: compliant, non_compliant

    def to_dict(self):
        return {
            "pollutant": self.pollutant,
            "measured_value": self.measured_value,
            "compliance_status": self.compliance_status,
        }


class WorkforceRecord(db.Model):
    __tablename__ = "workforce_records"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False, index=True)
    reporting_year = db.Column(db.Integer, nullable=False)
    department = db.Column(db.String(128), default="")
    gender = db.Column(db.String(20), nullable=True)

    def to_dict(self):
        return {"department": self.department, "gender": self.gender}


class SafetyIncident(db.Model):
    __tablename__ = "safety_incidents"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False, index=True)
    reporting_year = db.Column(db.Integer, nullable=False)
    severity = db.Column(db.String(20), default="minor")
    # Severity: minor, major, fatal
    description = db.Column(db.Text, default="")
    occurred_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {"severity": self.severity, "description": self.description}


class EthicsRecord(db.Model):
    __tablename__ = "ethics_records"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False, index=True)
    reporting_year = db.Column(db.Integer, nullable=False)
    audit_type = db.Column(db.String(64), default="")
    audit_score = db.Column(db.Float, nullable=True)
    compliance_status = db.Column(db.String(20), default="compliant")

    def to_dict(self):
        return {
            "audit_type": self.audit_type,
            "audit_score": self.audit_score,
            "compliance_status": self.compliance_status,
        }


class ScoreSnapshot(db.Model):
    """Persisted ESG score summary; the peer data for benchmarking."""
    __tablename__ = "score_snapshots"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False, index=True)
    reporting_year = db.Column(db.Integer, nullable=False)
    sector = db.Column(db.String(64), default="")
    environmental = db.Column(db.Integer, nullable=False)
    social = db.Column(db.Integer, nullable=False)
    governance = db.Column(db.Integer, nullable=False)
    composite = db.Column(db.Integer, nullable=False)
    rating = db.Column(db.String(8), nullable=False)
    confidence = db.Column(db.String(8), default="none")
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self):
        return {
            "company_id": self.company_id,
            "reporting_year": self.reporting_year,
            "sector": self.sector,
            "environmental": self.environmental,
            "social": self.social,
            "governance": self.governance,
            "composite": self.composite,
            "rating": self.rating,
            "confidence": self.confidence,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ComplianceRecordRow(db.Model):
    """Cached ComplianceRecord, written when a caller asks to persist a framework run."""
    __tablename__ = "compliance_records"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(64), nullable=False, index=True)
    reporting_year = db.Column(db.Integer, nullable=False)
    framework_id = db.Column(db.String(32), nullable=False)
    framework_version = db.Column(db.String(32), default="")
    requirement_id = db.Column(db.String(32), nullable=False)
    category = db.Column(db.String(20), nullable=False)
    materiality_level = db.Column(db.String(20), default="MEDIUM")
    compliance_status = db.Column(db.String(20), nullable=False)
    # Status: COMPLIANT, PARTIAL, NON_COMPLIANT, IN_PROGRESS, NOT_STARTED
    compliance_score = db.Column(db.Integer, default=0)
    data_quality_score = db.Column(db.Integer, default=0)
    completeness_score = db.Column(db.Integer, default=0)
    verification_status = db.Column(db.String(20), default="SELF_ASSESSED")
    computed_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    @classmethod
    def from_record(cls, record):
        return cls(
            company_id=str(record["company_id"]),
            reporting_year=record["reporting_year"],
            framework_id=record["framework_id"],
            framework_version=record["framework_version"],
            requirement_id=record["requirement_id"],
            category=record["category"],
            materiality_level=record["materiality_level"],
            compliance_status=record["compliance_status"],
            compliance_score=record["compliance_score"],
            data_quality_score=record["data_quality_score"],
            completeness_score=record["completeness_score"],
            verification_status=record["verification_status"],
        )


OPERATIONAL_MODELS = {
    "waste": WasteRecord,
    "air": AirQualityRecord,
    "workforce": WorkforceRecord,
    "safety_incidents": SafetyIncident,
    "ethics": EthicsRecord,
}
