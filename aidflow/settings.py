# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Environment-driven settings for the workflow engine.
"""

import os
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class Settings(BaseModel):
    """Runtime settings read once at process start."""
    
    model_config = ConfigDict(frozen=True)
    
    environment: str = Field(default="development", description="Deployment environment")
    service_name: str = Field(default="aidflow", description="Service name for telemetry")
    service_version: str = Field(default="1.0.0", description="Service version for telemetry")
    otel_enabled: bool = Field(default=True, description="Whether tracing is configured")
    otel_exporter_endpoint: Optional[str] = Field(None, description="OTLP collector endpoint")
    supervisor_approval_threshold: Decimal = Field(
        default=Decimal("50000"), gt=0, description="Amount above which supervisor sign-off is flagged"
    )
    minimum_eligibility_score: int = Field(
        default=50, ge=0, le=100, description="Score below which a request is flagged as weak"
    )
    
    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        values = {
            "environment": os.getenv('ENVIRONMENT', 'development'),
            "service_version": os.getenv('SERVICE_VERSION', '1.0.0'),
            "otel_enabled": os.getenv('OTEL_ENABLED', 'true').lower() == 'true',
            "otel_exporter_endpoint": os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT') or None,
        }
        
        threshold = os.getenv('AIDFLOW_SUPERVISOR_APPROVAL_THRESHOLD')
        if threshold:
            values["supervisor_approval_threshold"] = Decimal(threshold)
        
        minimum_score = os.getenv('AIDFLOW_MINIMUM_ELIGIBILITY_SCORE')
        if minimum_score:
            values["minimum_eligibility_score"] = int(minimum_score)
        
        return cls(**values)
