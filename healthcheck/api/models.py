"""Pydantic models for the health endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class CheckSnapshot(BaseModel):
    id: str
    name: str
    ok: bool
    severity: int
    businessImpact: str
    technicalSummary: str
    panicGuide: str
    checkOutput: str
    lastUpdated: str


class About(BaseModel):
    systemCode: str
    name: str
    description: str


class HealthResponse(About):
    schemaVersion: int
    checks: list[CheckSnapshot]
    ok: bool
