"""Built-in feature set for generated health-endpoint services.

Artifacts reference Go source files and templates of the scaffolded
project; file contents here are placeholders that the templating layer
replaces when it materializes the bundle.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from .catalog import FeatureCatalog
from .provider import BaseArtifactProvider
from .types import Feature, FeatureArtifacts, FeatureType, PostAction, ProjectProfile, Tier

HEALTH_SCHEMA = "template-health/schemas/health.tsp"
HEALTH_API_SCHEMA = "template-health/schemas/health-api.tsp"
METRICS_TEMPLATE = "template-health/templates/go-metrics-advanced.tmpl"
TRACING_TEMPLATE = "template-health/templates/go-tracing-advanced.tmpl"
LOGGING_TEMPLATE = "template-health/templates/go-structured-logging.tmpl"
SRE_ALERTS_TEMPLATE = "template-health/templates/sre-prometheus-alerts.tmpl"
SRE_DASHBOARD_TEMPLATE = "template-health/templates/sre-grafana-dashboard.tmpl"
SRE_SLO_TEMPLATE = "template-health/templates/sre-sli-slo-config.tmpl"


def _go_get(description: str, module: str) -> PostAction:
    return PostAction(
        type="install",
        description=description,
        command="go",
        args=("get", module),
        working_dir=".",
    )


class HealthProvider(BaseArtifactProvider):
    """Health check handlers, growing with the tier they target."""

    _TEMPLATES = {
        Tier.BASIC: [HEALTH_SCHEMA],
        Tier.INTERMEDIATE: [HEALTH_SCHEMA, HEALTH_API_SCHEMA],
        Tier.ADVANCED: [HEALTH_SCHEMA, HEALTH_API_SCHEMA, METRICS_TEMPLATE],
        Tier.ENTERPRISE: [
            HEALTH_SCHEMA,
            HEALTH_API_SCHEMA,
            METRICS_TEMPLATE,
            TRACING_TEMPLATE,
            SRE_ALERTS_TEMPLATE,
        ],
    }

    _HANDLER = {
        Tier.BASIC: "// Basic health handler implementation",
        Tier.INTERMEDIATE: "// Intermediate health handler with dependencies",
        Tier.ADVANCED: "// Advanced health handler with metrics",
        Tier.ENTERPRISE: "// Enterprise health handler with full observability",
    }

    def __init__(self, tier: Tier) -> None:
        super().__init__(templates=self._TEMPLATES[tier])
        self.tier = tier

    def build(self, artifacts: FeatureArtifacts, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        artifacts.files["internal/handlers/health.go"] = self._HANDLER[self.tier]
        if self.tier.level >= Tier.ADVANCED.level:
            artifacts.files["internal/observability/metrics.go"] = (
                f"// {self.tier.value.title()} metrics implementation"
            )
        if self.tier is Tier.ENTERPRISE:
            artifacts.files["internal/observability/tracing.go"] = "// Enterprise tracing implementation"
            artifacts.files["deployments/monitoring/alerts.yml"] = "# Prometheus alerting rules"

        artifacts.metadata["health_tier"] = self.tier.value
        artifacts.metadata["endpoints"] = list(config.get("endpoints") or [])


class ObservabilityProvider(BaseArtifactProvider):
    """Metrics, tracing, logging and SRE assets backed by OpenTelemetry."""

    def __init__(self, components: Sequence[str]) -> None:
        super().__init__()
        self.components = list(components)

    def build(self, artifacts: FeatureArtifacts, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        for component in self.components:
            if component == "metrics":
                artifacts.templates.append(METRICS_TEMPLATE)
                artifacts.files["internal/observability/metrics.go"] = "// OpenTelemetry metrics implementation"
            elif component == "tracing":
                artifacts.templates.append(TRACING_TEMPLATE)
                artifacts.files["internal/observability/tracing.go"] = "// OpenTelemetry tracing implementation"
            elif component == "logging":
                artifacts.templates.append(LOGGING_TEMPLATE)
                artifacts.files["internal/observability/logging.go"] = "// Structured logging implementation"
            elif component == "sre":
                artifacts.templates.extend([SRE_ALERTS_TEMPLATE, SRE_DASHBOARD_TEMPLATE, SRE_SLO_TEMPLATE])
                artifacts.files["deployments/monitoring/alerts.yml"] = "# SRE alerting rules"
                artifacts.files["deployments/monitoring/dashboard.json"] = "{}"
                artifacts.files["deployments/monitoring/slo-config.yml"] = "# SLI/SLO configuration"

        artifacts.post_actions.append(_go_get("Install OpenTelemetry dependencies", "go.opentelemetry.io/otel"))
        artifacts.metadata["observability_components"] = list(self.components)
        artifacts.metadata["service_name"] = str(config.get("serviceName") or profile.name)


class SecurityProvider(BaseArtifactProvider):
    """Authentication, RBAC, mTLS and audit logging."""

    def __init__(self, level: str) -> None:
        super().__init__()
        self.level = level

    def build(self, artifacts: FeatureArtifacts, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        files = artifacts.files
        if self.level == "basic":
            files["internal/security/auth.go"] = "// Basic authentication implementation"
        elif self.level == "rbac":
            files["internal/security/auth.go"] = "// RBAC authentication implementation"
            files["internal/security/rbac.go"] = "// Role-based access control"
            files["configs/rbac-dev.json"] = "{}"
        elif self.level == "enterprise":
            files["internal/security/auth.go"] = "// Enterprise authentication implementation"
            files["internal/security/rbac.go"] = "// Enterprise RBAC"
            files["internal/security/mtls.go"] = "// Mutual TLS implementation"
            files["internal/compliance/audit.go"] = "// Audit logging implementation"
            files["configs/rbac-production.json"] = "{}"
        artifacts.metadata["security_level"] = self.level


class StorageProvider(BaseArtifactProvider):
    """Database, cache or file storage backend."""

    _DRIVERS = {
        "postgres": "github.com/lib/pq",
        "mysql": "github.com/go-sql-driver/mysql",
        "sqlite": "github.com/mattn/go-sqlite3",
    }

    def __init__(self, storage_type: str) -> None:
        super().__init__()
        self.storage_type = storage_type

    def validate(self, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        if self.storage_type == "database":
            driver = config.get("driver", "postgres")
            if driver not in self._DRIVERS:
                raise ValueError(f"unsupported database driver: {driver}")

    def build(self, artifacts: FeatureArtifacts, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        if self.storage_type == "database":
            driver = str(config.get("driver", "postgres"))
            artifacts.files["internal/storage/database.go"] = f"// Database connection and operations ({driver})"
            artifacts.files["internal/storage/migrations/001_initial.sql"] = "-- Initial database schema"
            artifacts.post_actions.append(_go_get("Install database driver", self._DRIVERS[driver]))
            artifacts.metadata["database_driver"] = driver
        elif self.storage_type == "cache":
            artifacts.files["internal/storage/cache.go"] = "// Cache implementation"
            artifacts.post_actions.append(_go_get("Install Redis client", "github.com/go-redis/redis/v8"))
        elif self.storage_type == "file":
            artifacts.files["internal/storage/file.go"] = "// File storage implementation"
        artifacts.metadata["storage_type"] = self.storage_type


class ApiProvider(BaseArtifactProvider):
    """REST, GraphQL or gRPC API surface."""

    def __init__(self, api_type: str) -> None:
        super().__init__(templates=[HEALTH_API_SCHEMA] if api_type == "rest" else [])
        self.api_type = api_type

    def build(self, artifacts: FeatureArtifacts, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        if self.api_type == "rest":
            artifacts.files["internal/api/rest/router.go"] = "// REST API router implementation"
            artifacts.files["internal/api/rest/handlers.go"] = "// REST API handlers"
        elif self.api_type == "graphql":
            artifacts.files["internal/api/graphql/schema.go"] = "// GraphQL schema implementation"
            artifacts.files["internal/api/graphql/resolvers.go"] = "// GraphQL resolvers"
            artifacts.post_actions.append(_go_get("Install GraphQL library", "github.com/99designs/gqlgen"))
        elif self.api_type == "grpc":
            artifacts.files["internal/api/grpc/server.go"] = "// gRPC server implementation"
            artifacts.files["api/proto/service.proto"] = "// Protocol buffer definitions"
            artifacts.post_actions.append(_go_get("Install gRPC libraries", "google.golang.org/grpc"))
        artifacts.metadata["api_type"] = self.api_type


_DATABASE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "driver": {"type": "string", "enum": sorted(StorageProvider._DRIVERS)},
        "poolSize": {"type": "integer", "minimum": 1},
    },
}

_OBSERVABILITY_TIERS = [
    ("observability-basic", "Basic Observability", ["logging"], Tier.BASIC),
    ("observability-metrics", "Metrics & Logging", ["metrics", "logging"], Tier.INTERMEDIATE),
    ("observability-full", "Full Observability", ["metrics", "tracing", "logging"], Tier.ADVANCED),
    ("observability-enterprise", "Enterprise Observability", ["metrics", "tracing", "logging", "sre"], Tier.ENTERPRISE),
]

_SECURITY_LEVELS = [
    ("security-basic", "Basic Security", "basic", Tier.BASIC),
    ("security-rbac", "RBAC Security", "rbac", Tier.INTERMEDIATE),
    ("security-enterprise", "Enterprise Security", "enterprise", Tier.ENTERPRISE),
]


def create_builtin_features() -> List[Feature]:
    """Return the predefined health, observability, security, storage and API features."""
    features: List[Feature] = []

    for tier in Tier:
        features.append(
            Feature(
                id=f"health-{tier.value}",
                name=f"Health Checks ({tier.value})",
                description=f"Health check implementation for {tier.value} tier",
                type=FeatureType.CORE,
                category="health",
                priority=100,
                min_tier=tier,
                default_config={"endpoints": ["/health", "/health/ready", "/health/live"]},
                provider=HealthProvider(tier),
            )
        )

    for feature_id, name, components, tier in _OBSERVABILITY_TIERS:
        features.append(
            Feature(
                id=feature_id,
                name=name,
                description=f"Observability stack with {', '.join(components)}",
                type=FeatureType.OBSERVABILITY,
                category="observability",
                priority=90,
                min_tier=tier,
                tags=tuple(components),
                provider=ObservabilityProvider(components),
            )
        )

    for feature_id, name, level, tier in _SECURITY_LEVELS:
        features.append(
            Feature(
                id=feature_id,
                name=name,
                description=f"Security implementation - {level} level",
                type=FeatureType.SECURITY,
                category="security",
                priority=80,
                min_tier=tier,
                provider=SecurityProvider(level),
            )
        )

    for storage_type in ("database", "cache", "file"):
        features.append(
            Feature(
                id=f"storage-{storage_type}",
                name=f"{storage_type.title()} Storage",
                description=f"{storage_type} storage implementation",
                type=FeatureType.STORAGE,
                category="storage",
                priority=70,
                # Cache and file storage cannot share the storage layer.
                conflicts=frozenset({"storage-file"}) if storage_type == "cache" else frozenset(),
                default_config={"driver": "postgres"} if storage_type == "database" else {},
                config_schema=_DATABASE_SCHEMA if storage_type == "database" else None,
                provider=StorageProvider(storage_type),
            )
        )

    for api_type in ("rest", "graphql", "grpc"):
        features.append(
            Feature(
                id=f"api-{api_type}",
                name=f"{api_type.upper() if api_type != 'graphql' else 'GraphQL'} API",
                description=f"{api_type} API implementation",
                type=FeatureType.API,
                category="api",
                priority=60,
                dependencies=("health-basic",),
                provider=ApiProvider(api_type),
            )
        )

    return features


def build_builtin_catalog() -> FeatureCatalog:
    """Return a new catalog populated with ``create_builtin_features()``."""
    return FeatureCatalog(create_builtin_features())


__all__ = [
    "HealthProvider",
    "ObservabilityProvider",
    "SecurityProvider",
    "StorageProvider",
    "ApiProvider",
    "create_builtin_features",
    "build_builtin_catalog",
]
