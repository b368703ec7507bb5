"""API routes for FreightSmith."""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..history.models import ImportNotFoundError
from ..resolution.fallback import FallbackUnavailableError
from ..risk.models import UnitSnapshot

router = APIRouter()


def get_engine():
    """Get the global engine instance."""
    from .app import get_engine as _get_engine

    return _get_engine()


class FormatMatchRequest(BaseModel):
    """Request to fingerprint a header set."""

    headers: list[str]


class ImportRequest(BaseModel):
    """Request to run an import over already-parsed rows."""

    headers: list[str]
    rows: list[dict[str, Any]] = Field(default_factory=list)
    file_name: Optional[str] = None


class ImprovementRequest(BaseModel):
    """Request to run the improvement loop for an import."""

    force: bool = False


class RiskEvaluationRequest(BaseModel):
    """Request to evaluate one unit."""

    unit: UnitSnapshot
    record: bool = True


# Dictionary endpoints


@router.get("/dictionary")
async def list_dictionary():
    """List learned header mappings, most used first."""
    engine = get_engine()
    try:
        entries = await engine.dictionary_store.list_all()
        return {
            "count": len(entries),
            "entries": [entry.model_dump(mode="json") for entry in entries],
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/dictionary/{entry_id}")
async def delete_dictionary_entry(entry_id: int):
    """Delete a learned header mapping."""
    engine = get_engine()
    deleted = await engine.dictionary_store.delete(entry_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Dictionary entry not found")
    return {"status": "deleted", "entry_id": entry_id}


@router.post("/dictionary/seed")
async def seed_dictionary():
    """Seed the dictionary with the canonical field aliases."""
    engine = get_engine()
    try:
        seeded = await engine.dictionary_store.seed_from_registry()
        return {"status": "seeded", "seeded": seeded}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# Format endpoints


@router.post("/formats/match")
async def match_format(request: FormatMatchRequest):
    """Match headers against the known format catalogue."""
    engine = get_engine()
    return engine.registry.match(request.headers).to_dict()


# Import endpoints


@router.post("/imports")
async def run_import(request: ImportRequest):
    """Resolve, score and record an import."""
    engine = get_engine()
    try:
        outcome = await engine.import_service.run_import(
            request.headers, request.rows, file_name=request.file_name
        )
        return outcome.model_dump(mode="json")
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/imports/{import_id}/quality")
async def get_import_quality(import_id: str):
    """Recompute the quality report of a past import."""
    engine = get_engine()
    try:
        report = await engine.import_service.quality_report(import_id)
        return report.model_dump(mode="json")
    except ImportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/imports/{import_id}/improve")
async def improve_import(import_id: str, request: Optional[ImprovementRequest] = None):
    """Ask the fallback about an import's unmapped headers and learn from it."""
    engine = get_engine()
    force = request.force if request else False
    try:
        outcome = await engine.improvement_planner.improve(import_id, force=force)
        return outcome.model_dump(mode="json")
    except ImportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FallbackUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# Risk endpoints


@router.post("/risk/evaluate")
async def evaluate_risk(request: RiskEvaluationRequest):
    """Evaluate a unit's lifecycle mode and demurrage exposure."""
    engine = get_engine()
    try:
        assessment = await engine.import_service.evaluate_unit(
            request.unit, record=request.record
        )
        return assessment.model_dump(mode="json")
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/risk/{unit_ref}/history")
async def get_risk_history(unit_ref: str, limit: int = 20):
    """Get recorded risk snapshots of a unit, newest first."""
    engine = get_engine()
    try:
        snapshots = await engine.history_store.get_risk_snapshots(unit_ref, limit=limit)
        return {
            "unit_ref": unit_ref,
            "snapshots": [snapshot.model_dump(mode="json") for snapshot in snapshots],
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# Health check


@router.get("/health")
async def health_check():
    """Health check endpoint with diagnostics."""
    from ..config import settings

    # Gather non-secret diagnostics
    config = {
        "llm_provider": settings.llm_provider,
        "model_name": settings.model_name,
        "anthropic_key_present": bool(settings.anthropic_api_key),
        "openrouter_key_present": bool(settings.openrouter_api_key),
        "fallback_enabled": settings.fallback_enabled,
        "database_path": str(settings.database_path),
    }

    if settings.llm_provider == "openrouter":
        config["openrouter_model"] = settings.openrouter_model

    return {
        "status": "ok",
        "service": "freightsmith",
        "config": config,
    }
