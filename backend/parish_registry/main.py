import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from parish_registry import __version__, config

# Ensure all SQLAlchemy models are imported so relationships resolve
import parish_registry.models  # noqa: F401

from parish_registry.api import (
    activities,
    community_groups,
    families,
    members,
    rbac,                # /rbac
    reports,             # /reports
    sacramental_records, # /sacramental-records
    sacraments,
    tithes,
)

# Ops/system endpoints (/health, /version)
from parish_registry.api.system import router as system_router

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Parish Registry", version=__version__)

# --- CORS for local frontend dev ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(system_router)  # /health, /version

app.include_router(members.router)   # /members
app.include_router(families.router)  # /families
app.include_router(community_groups.router)  # /community-groups
app.include_router(activities.router)        # /activities

# Generic sacrament facts, then the detailed registers that write them
app.include_router(sacraments.router)           # /sacraments
app.include_router(sacramental_records.router)  # /sacramental-records

app.include_router(tithes.router)   # /tithes
app.include_router(reports.router)  # /reports

# RBAC (admin)
app.include_router(rbac.router)  # /rbac
