# services/deps.py
"""FastAPI dependencies resolving the service objects attached to `app.state`."""

from fastapi import Request

from packages.common.config import Settings
from services.accounts.repo import AccountRepo
from services.assessment.engine import SubmissionEngine
from services.catalog.repo import CatalogRepo
from services.verification.channel import VerificationChannel


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_accounts(request: Request) -> AccountRepo:
    return request.app.state.accounts


def get_catalog(request: Request) -> CatalogRepo:
    return request.app.state.catalog


def get_engine(request: Request) -> SubmissionEngine:
    return request.app.state.engine


def get_verification(request: Request) -> VerificationChannel:
    return request.app.state.verification
