import logging
import time
import uuid
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from careerpath.config import BaseConfig, get_config
from careerpath.core.engine import EligibilityEngine
from careerpath.core.errors import CatalogUnavailableError, UnknownCareerError, UnknownCountryError
from careerpath.core.frameworks import format_qualification_level
from careerpath.core.grades import build_grade_sheet, missing_mandatory
from careerpath.core.models import EligibilityResult, UserPreferences
from careerpath.core.normalization import SubjectResolver
from careerpath.core.repositories import CachedCatalogRepository, CatalogRepository, JsonCatalogRepository
from careerpath.core.universities import UniversityClassifier
from careerpath.logging_config import init_logging

logger = logging.getLogger(__name__)


# --------- Request models ----------
class GradesRequest(BaseModel):
    country: str
    grades: Dict[str, Any] = Field(default_factory=dict)
    enforce_compulsory_subjects: Optional[bool] = None


class EligibilityRequest(GradesRequest):
    career: Optional[str] = None
    level: Optional[str] = None


class CareerRequest(GradesRequest):
    career: str
    level: Optional[str] = None


def _result_json(result: EligibilityResult, resolver: SubjectResolver) -> Dict[str, Any]:
    return {
        "status": result.status.value,
        "match_score": result.match_score,
        "missing_subjects": result.missing_subjects,
        "close_subjects": result.close_subjects,
        "missing_labels": [resolver.display_label(s) for s in result.missing_subjects],
        "close_labels": [resolver.display_label(s) for s in result.close_subjects],
        "met_requirements": result.met_requirements,
        "total_requirements": result.total_requirements,
    }


def create_app(config: Optional[type] = None, repo: Optional[CatalogRepository] = None) -> FastAPI:
    cfg = config or get_config()
    init_logging(cfg.LOG_LEVEL, cfg.LOG_FORMAT)

    if repo is None:
        repo = CachedCatalogRepository(
            JsonCatalogRepository(cfg.DATA_DIR),
            catalog_ttl=cfg.CATALOG_TTL_SECONDS,
            career_ttl=cfg.CAREER_TTL_SECONDS,
        )
    engine = EligibilityEngine(repo, UserPreferences(cfg.ENFORCE_COMPULSORY_SUBJECTS))
    universities = UniversityClassifier(engine)

    app = FastAPI(title="CareerPath Eligibility")
    app.state.engine = engine
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _access_log(request: Request, call_next):
        request_id = uuid.uuid4().hex[:12]
        start = time.time()
        response = await call_next(request)
        logger.info(
            "%s %s %s %.0fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.time() - start) * 1000,
            extra={"request_id": request_id},
        )
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(UnknownCountryError)
    async def _unknown_country(request: Request, exc: UnknownCountryError):
        return JSONResponse(status_code=404, content={"error": "Unknown country", "details": str(exc)})

    @app.exception_handler(UnknownCareerError)
    async def _unknown_career(request: Request, exc: UnknownCareerError):
        return JSONResponse(status_code=404, content={"error": "Unknown career", "details": str(exc)})

    @app.exception_handler(CatalogUnavailableError)
    async def _catalog_unavailable(request: Request, exc: CatalogUnavailableError):
        logger.error("Catalog unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"error": "Catalog unavailable", "details": str(exc)})

    def _preferences(req: GradesRequest) -> UserPreferences:
        if req.enforce_compulsory_subjects is None:
            return engine.preferences
        return UserPreferences(enforce_compulsory_subjects=req.enforce_compulsory_subjects)

    def _grade_sheet(req: GradesRequest):
        if not req.country or not req.country.strip():
            raise HTTPException(status_code=400, detail="No country provided")
        resolver = engine.resolver_for(req.country)
        return resolver, build_grade_sheet(req.grades, resolver)

    # --------- Endpoints ----------
    @app.get("/countries")
    def countries() -> List[Dict[str, Any]]:
        return repo.list_countries()

    @app.get("/subjects")
    def subjects(country: str = Query(...)) -> Dict[str, Any]:
        catalog = repo.get_subject_catalog(country)
        return {
            "country": catalog.country,
            "subjects": [asdict(s) for s in catalog.subjects],
            "aliases": catalog.aliases,
            "either_or_groups": [asdict(g) for g in catalog.either_or_groups],
            "mandatory_subjects": catalog.mandatory,
        }

    @app.get("/careers")
    def careers(country: str = Query(...)) -> List[Dict[str, Any]]:
        code = repo.get_subject_catalog(country).country
        out: List[Dict[str, Any]] = []
        for career in repo.list_careers():
            tiers = repo.get_career_requirements(career.name, code)
            out.append({
                "name": career.name,
                "category": career.category,
                "levels": [
                    {
                        "level": t.level,
                        "label": format_qualification_level(t.level, code, t.nqf_level),
                        "min_grades": t.min_grades,
                        "aps": t.aps,
                    }
                    for t in tiers
                ],
            })
        return out

    @app.post("/eligibility")
    def eligibility(req: EligibilityRequest):
        resolver, grades = _grade_sheet(req)
        prefs = _preferences(req)
        warnings = []
        if prefs.enforce_compulsory_subjects:
            missing = missing_mandatory(grades, resolver)
            if missing:
                names = ', '.join(resolver.display_name(s) for s in missing)
                warnings.append(f"Compulsory subjects not entered: {names}")

        if req.career:
            result = engine.evaluate_career(grades, req.career, req.country, req.level, prefs)
            return {"career": req.career, **_result_json(result, resolver), "warnings": warnings}

        ranked = engine.evaluate_careers(grades, req.country, prefs)
        return {
            "careers": [
                {"career": ec.career.name, "category": ec.career.category, **_result_json(ec.result, resolver)}
                for ec in ranked
            ],
            "warnings": warnings,
        }

    @app.post("/improvements")
    def improvements(req: CareerRequest) -> Dict[str, Any]:
        _resolver, grades = _grade_sheet(req)
        tier = engine.requirement_for(req.career, req.country, req.level)
        deficits = engine.improvements(grades, tier.min_grades, req.country, _preferences(req))
        return {"career": req.career, "level": tier.level, "improvements": deficits}

    @app.post("/aps")
    def aps(req: GradesRequest) -> Dict[str, Any]:
        _resolver, grades = _grade_sheet(req)
        policy = universities.policy_for(req.country)
        breakdown = policy.compute_aps_with_breakdown(grades, engine.resolver_for(req.country))
        return asdict(breakdown)

    @app.post("/universities")
    def university_list(req: CareerRequest) -> Dict[str, Any]:
        _resolver, grades = _grade_sheet(req)
        tier = engine.requirement_for(req.career, req.country, req.level)
        rows = universities.classify(grades, tier, _preferences(req))
        return {
            "career": req.career,
            "level": tier.level,
            "user_aps": universities.user_aps(grades, req.country),
            "universities": [
                {**asdict(u), "status": u.status.value, "aps_status": u.aps_status.value,
                 "subject_status": u.subject_status.value}
                for u in rows
            ],
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("careerpath.app:app", host="0.0.0.0", port=BaseConfig.PORT, reload=True)
