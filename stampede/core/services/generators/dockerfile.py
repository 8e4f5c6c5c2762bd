"""
Dockerfile generator — multi-stage build for the generated Go app.

Apps with an asset pipeline get an extra node stage that builds the
bundles before the Go binary is compiled.
"""

from __future__ import annotations

from string import Template

from stampede.core.models.template import GeneratedFile

_ASSETS_STAGE = """\
# ── Assets stage ────────────────────────────────────────────────
FROM node:20-alpine AS assets

WORKDIR /app

# Install dependencies first for layer caching
COPY package*.json ./
RUN npm install --no-progress

COPY webpack.config.js ./
COPY assets ./assets
RUN npm run build

"""

_GO_DOCKERFILE = Template("""\
$assets# ── Build stage ─────────────────────────────────────────────────
FROM golang:1.22-alpine AS builder

WORKDIR /app

# Download dependencies first for layer caching
$deps
COPY . .
${copy_assets}\
RUN CGO_ENABLED=$cgo GOOS=linux go build -o /bin/app .

# ── Runtime stage ───────────────────────────────────────────────
FROM alpine:3.19

WORKDIR /app

# Create non-root user
RUN addgroup -g 1000 app && adduser -u 1000 -G app -s /bin/sh -D app

COPY --from=builder /bin/app /app/app
$runtime_files
USER app

ENV GO_ENV=production
EXPOSE 3000

CMD ["/app/app"]
""")

_MODULE_DEPS = "COPY go.mod go.sum* ./\nRUN go mod download\n"
_VENDOR_DEPS = "COPY Gopkg.toml Gopkg.lock ./\n"


def generate_dockerfile(
    *,
    with_assets: bool,
    with_dep: bool,
    dialect: str | None = None,
    api: bool = False,
) -> GeneratedFile:
    """Generate a Dockerfile for the app.

    Args:
        with_assets: Include the webpack stage.
        with_dep: Dependencies are vendored (Gopkg) instead of a go.mod.
        dialect: Database dialect, None without a database. sqlite3 needs cgo.
        api: API-only app, so no templates to ship.
    """
    runtime = []
    if not api:
        runtime.append("COPY --from=builder /app/templates /app/templates")
        runtime.append("COPY --from=builder /app/public /app/public")
    if dialect:
        runtime.append("COPY --from=builder /app/database.yml /app/database.yml")

    content = _GO_DOCKERFILE.substitute(
        assets=_ASSETS_STAGE if with_assets else "",
        deps=_VENDOR_DEPS if with_dep else _MODULE_DEPS,
        copy_assets=(
            "COPY --from=assets /app/public/assets ./public/assets\n" if with_assets else ""
        ),
        cgo="1" if dialect == "sqlite3" else "0",
        runtime_files="".join(f"{line}\n" for line in runtime),
    )
    return GeneratedFile(
        path="Dockerfile",
        content=content,
        reason="Multi-stage Dockerfile for the Go app",
    )
