"""
Core application generator — the Go files every new app gets.

API-only apps get JSON rendering and no HTML templates or public
directory. Apps vendored with ``dep`` get no ``go.mod``: the dependency
tool writes its own manifest.
"""

from __future__ import annotations

from string import Template

from stampede import __version__
from stampede.core.models.options import NewOptions
from stampede.core.models.template import GeneratedFile

_MAIN_GO = Template("""\
package main

import (
	"log"

	"$module/actions"
)

// main is the starting point for your application.
// Run it with: go run .
func main() {
	app := actions.App()
	if err := app.Serve(); err != nil {
		log.Fatal(err)
	}
}
""")

_APP_GO = Template("""\
package actions

import (
	"log"
	"net/http"
	"os"
)

// ENV is used to switch settings based on where the application runs.
var ENV = envOr("GO_ENV", "development")

// Server is the $name HTTP server.
type Server struct {
	Addr    string
	Handler http.Handler
}

// Serve starts listening on Addr.
func (s *Server) Serve() error {
	log.Printf("$name listening on %s (%s)", s.Addr, ENV)
	return http.ListenAndServe(s.Addr, s.Handler)
}

// App is where all routes and middleware are defined.
func App() *Server {
	mux := http.NewServeMux()
	mux.HandleFunc("/", HomeHandler)
$static
	return &Server{Addr: ":" + envOr("PORT", "3000"), Handler: mux}
}

func envOr(key, fallback string) string {
	if v, ok := os.LookupEnv(key); ok {
		return v
	}
	return fallback
}
""")

_STATIC_ROUTE = (
    '\tmux.Handle("/assets/", http.StripPrefix("/assets/", '
    'http.FileServer(http.Dir("public/assets"))))'
)

_HOME_HTML_GO = """\
package actions

import "net/http"

// HomeHandler is the default handler to serve up a home page.
func HomeHandler(w http.ResponseWriter, r *http.Request) {
	renderHTML(w, "index.html", nil)
}
"""

_HOME_API_GO = """\
package actions

import "net/http"

// HomeHandler is the default handler, answering with a JSON greeting.
func HomeHandler(w http.ResponseWriter, r *http.Request) {
	renderJSON(w, http.StatusOK, map[string]string{"message": "Welcome!"})
}
"""

_RENDER_HTML_GO = """\
package actions

import (
	"html/template"
	"net/http"
	"path/filepath"
)

var templates = template.Must(template.ParseGlob(filepath.Join("templates", "*.html")))

func renderHTML(w http.ResponseWriter, name string, data interface{}) {
	w.Header().Set("Content-Type", "text/html; charset=utf-8")
	if err := templates.ExecuteTemplate(w, name, data); err != nil {
		http.Error(w, err.Error(), http.StatusInternalServerError)
	}
}
"""

_RENDER_API_GO = """\
package actions

import (
	"encoding/json"
	"net/http"
)

func renderJSON(w http.ResponseWriter, status int, v interface{}) {
	w.Header().Set("Content-Type", "application/json")
	w.WriteHeader(status)
	_ = json.NewEncoder(w).Encode(v)
}
"""

_GO_MOD = Template("""\
module $module

go 1.21
""")

_GITIGNORE = """\
vendor/
**/*.log
**/*.sqlite
.idea/
bin/
tmp/
node_modules/
.sass-cache/
public/assets/
.vscode/
.DS_Store
.env
"""

_ENV = """\
# This .env file is loaded in development only.
GO_ENV=development
PORT=3000
"""

_README = Template("""\
# $name

Generated by stampede $version.

## Starting the application

    go run .

Then point your browser to http://127.0.0.1:3000.
$database
""")

_README_DATABASE = Template("""\
## Database setup

The database settings live in `database.yml` ($dialect). Create the
databases listed there before starting the application.
""")

_APPLICATION_HTML = Template("""\
{{define "application"}}<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>$name</title>
    <link rel="stylesheet" href="/assets/application.css">
  </head>
  <body>
    <div class="container">{{template "content" .}}</div>
    <script src="/assets/application.js"></script>
  </body>
</html>{{end}}
""")

_INDEX_HTML = Template("""\
{{define "content"}}<h1>Welcome to $name!</h1>{{end}}
{{template "application" .}}
""")

_ROBOTS = """\
User-agent: *
Disallow: /
"""


def generate_app_files(options: NewOptions) -> list[GeneratedFile]:
    """Core files for a new application, paths relative to the app root."""
    module = options.module or options.name
    values = {"name": options.name, "module": module, "version": __version__}

    files = [
        _file("main.go", _MAIN_GO.substitute(values), "Application entry point"),
        _file(
            "actions/app.go",
            _APP_GO.substitute(values, static="" if options.api else _STATIC_ROUTE),
            "Routes and server",
        ),
        _file(
            "actions/home.go",
            _HOME_API_GO if options.api else _HOME_HTML_GO,
            "Default handler",
        ),
        _file(
            "actions/render.go",
            _RENDER_API_GO if options.api else _RENDER_HTML_GO,
            "Response rendering",
        ),
        _file(".gitignore", _GITIGNORE, "Version control exclusions"),
        _file(".env", _ENV, "Development environment"),
    ]

    if not options.with_dep:
        files.append(_file("go.mod", _GO_MOD.substitute(values), "Go module manifest"))

    database = ""
    if options.with_database:
        database = _README_DATABASE.substitute(dialect=options.db_type.value)
    files.append(
        _file("README.md", _README.substitute(values, database=database), "Getting started")
    )

    if not options.api:
        files.extend([
            _file("templates/application.html", _APPLICATION_HTML.substitute(values), "Layout"),
            _file("templates/index.html", _INDEX_HTML.substitute(values), "Home page"),
            _file("public/robots.txt", _ROBOTS, "Crawler rules"),
        ])

    return files


def _file(path: str, content: str, reason: str) -> GeneratedFile:
    return GeneratedFile(path=path, content=content, reason=reason)
