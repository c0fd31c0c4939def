from models.replenishment_model import _is_number
from models.types import ValidationError
from utils.ai_config import RRF_TARGET_MONTHS

NUMERIC_FIELDS = ("soh", "amc", "pipeline", "final_order")


def _num(value) -> float:
    return float(value) if value is not None else 0.0


def validate_requisition(lines, target_months) -> list:
    """Lines must be objects and their quantities numbers (or absent)."""
    errors = []
    if not isinstance(target_months, int) or isinstance(target_months, bool) or target_months <= 0:
        errors.append(("target_months", "must be a positive whole number of months"))
    for i, line in enumerate(lines):
        if not isinstance(line, dict):
            errors.append((f"lines[{i}]", "must be an object"))
            continue
        for name in NUMERIC_FIELDS:
            if line.get(name) is not None and not _is_number(line[name]):
                errors.append((f"lines[{i}].{name}", "must be a finite number"))
    return errors


def suggest_requisition_order(soh, amc, pipeline=None, target_months: int = RRF_TARGET_MONTHS) -> int:
    """Order up to `target_months` of AMC, counting stock on hand and in the pipeline."""
    need = _num(amc) * target_months + _num(pipeline) - _num(soh)
    return max(0, int(round(need)))


def requisition_issues(lines) -> list[str]:
    """Data-quality problems on requisition lines, numbered from 1."""
    issues = []
    for idx, line in enumerate(lines, start=1):
        soh = line.get("soh")
        amc = line.get("amc")
        final_order = line.get("final_order")
        if not line.get("item_id"):
            issues.append(f"Line {idx}: Missing item_id")
        if soh is not None and soh < 0:
            issues.append(f"Line {idx}: Negative SOH")
        if amc is not None and amc < 0:
            issues.append(f"Line {idx}: Negative AMC")
        if final_order is not None and final_order < 0:
            issues.append(f"Line {idx}: Negative final order")
        if soh is None or amc is None:
            issues.append(f"Line {idx}: Missing SOH/AMC")
    return issues


def build_requisition(lines, target_months: int = RRF_TARGET_MONTHS) -> dict:
    errors = validate_requisition(lines, target_months)
    if errors:
        raise ValidationError(errors)

    rows = []
    for line in lines:
        suggested = suggest_requisition_order(line.get("soh"), line.get("amc"), line.get("pipeline"), target_months)
        final_order = line.get("final_order")
        rows.append({
            "item_id": line.get("item_id"),
            "soh": line.get("soh"),
            "amc": line.get("amc"),
            "pipeline": line.get("pipeline"),
            "suggested_order": suggested,
            "final_order": final_order if final_order is not None else suggested,
            "comments": line.get("comments"),
        })
    return {
        "lines": rows,
        "issues": requisition_issues(lines),
        "target_months": target_months,
    }
