from fastapi import Request

from .config import Settings
from .database import Database
from .services import ClaimIssuer, SignInGate

def get_database(request: Request) -> Database:
    return request.app.state.database

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_claim_issuer(request: Request) -> ClaimIssuer:
    return request.app.state.claim_issuer

def get_sign_in_gate(request: Request) -> SignInGate:
    return request.app.state.sign_in_gate
