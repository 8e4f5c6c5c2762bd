"""
Asset pipeline generator — webpack config and asset sources.

Produces ``package.json``, ``webpack.config.js`` and the ``assets/``
tree. Installing the node packages is a separate command step so the
files can be generated without a package manager on the machine.
"""

from __future__ import annotations

import json

from stampede.core.models.template import GeneratedFile

_DEV_DEPENDENCIES: dict[str, str] = {
    "@babel/core": "^7.24.0",
    "@babel/preset-env": "^7.24.0",
    "babel-loader": "^9.1.3",
    "css-loader": "^6.10.0",
    "mini-css-extract-plugin": "^2.8.1",
    "sass": "^1.72.0",
    "sass-loader": "^14.1.1",
    "webpack": "^5.90.3",
    "webpack-cli": "^5.1.4",
}

_WEBPACK_CONFIG = """\
const path = require("path");
const MiniCssExtractPlugin = require("mini-css-extract-plugin");

module.exports = {
  mode: process.env.NODE_ENV === "production" ? "production" : "development",
  entry: {
    application: ["./assets/js/application.js", "./assets/css/application.scss"],
  },
  output: {
    filename: "[name].js",
    path: path.resolve(__dirname, "public", "assets"),
  },
  plugins: [new MiniCssExtractPlugin({ filename: "[name].css" })],
  module: {
    rules: [
      {
        test: /\\.jsx?$/,
        exclude: /node_modules/,
        use: { loader: "babel-loader", options: { presets: ["@babel/preset-env"] } },
      },
      {
        test: /\\.s[ac]ss$/,
        use: [MiniCssExtractPlugin.loader, "css-loader", "sass-loader"],
      },
    ],
  },
};
"""

_APPLICATION_JS = """\
document.addEventListener("DOMContentLoaded", () => {
  // application code goes here
});
"""

_APPLICATION_SCSS = """\
$primary: #2c3e50;

body {
  color: $primary;
  font-family: sans-serif;
}
"""


def package_json(app_name: str) -> str:
    """Render ``package.json`` for the app."""
    manifest = {
        "name": app_name.lower(),
        "version": "1.0.0",
        "private": True,
        "scripts": {
            "build": "webpack --mode production",
            "dev": "webpack --watch",
        },
        "devDependencies": _DEV_DEPENDENCIES,
    }
    return json.dumps(manifest, indent=2) + "\n"


def generate_webpack_files(app_name: str) -> list[GeneratedFile]:
    """Asset pipeline files, paths relative to the app root."""
    return [
        GeneratedFile(path="package.json", content=package_json(app_name), reason="Node manifest"),
        GeneratedFile(path="webpack.config.js", content=_WEBPACK_CONFIG, reason="Bundler config"),
        GeneratedFile(path="assets/js/application.js", content=_APPLICATION_JS, reason="JS entry"),
        GeneratedFile(
            path="assets/css/application.scss", content=_APPLICATION_SCSS, reason="CSS entry"
        ),
        GeneratedFile(path="assets/images/.keep", content="", reason="Image directory"),
        GeneratedFile(path="public/assets/.keep", content="", reason="Build output directory"),
    ]
