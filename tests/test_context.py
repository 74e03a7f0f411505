"""Tests for codebase context analysis."""

from __future__ import annotations

import pytest

from agent_resolver.context import MAX_SCANNED_FILES, ContextAnalyzer, cache_key
from agent_resolver.context.rules import extract_imports
from agent_resolver.models import TaskContext

pytestmark = pytest.mark.anyio

APP_TS = """
import React from 'react';
import { helper } from './local';
const express = require('express');
const lazy = await import('@scope/pkg/sub');
"""

DB_PY = """
import os
from sqlalchemy.orm import Session
import psycopg2, json
from .models import User
"""


class TestImportExtraction:
    def test_script_imports(self):
        assert extract_imports(APP_TS, "src/app.ts") == ["react", "@scope/pkg", "express"]

    def test_python_imports(self):
        assert extract_imports(DB_PY, "src/db.py") == ["sqlalchemy", "os", "psycopg2", "json"]

    def test_node_prefix_stripped(self):
        assert extract_imports("import fs from 'node:fs';", "a.js") == ["fs"]

    def test_python_rules_not_applied_to_scripts(self):
        assert extract_imports("from typing import Any", "a.ts") == []


class TestContextAnalyzer:
    async def test_analyze_context(self, make_reader):
        reader = make_reader({"src/app.ts": APP_TS, "src/db.py": DB_PY})
        analyzer = ContextAnalyzer(reader=reader)

        context = await analyzer.analyze_context(["src/app.ts", "src/db.py", "README.md"])

        assert context.affected_file_types == [".md", ".py", ".ts"]
        assert context.import_patterns == [
            "@scope/pkg",
            "express",
            "json",
            "os",
            "psycopg2",
            "react",
            "sqlalchemy",
        ]
        assert {"typescript", "python", "postgresql", "sqlalchemy", "express", "react"} <= set(
            context.technology_stack
        )
        assert "express" in context.architectural_patterns
        assert "react" in context.architectural_patterns
        # README.md is not a source file
        assert sorted(reader.calls) == ["src/app.ts", "src/db.py"]

    async def test_infrastructure_components(self, make_reader):
        analyzer = ContextAnalyzer(reader=make_reader())
        context = await analyzer.analyze_context(
            ["infra/main.tf", "k8s/deploy.yaml", "Dockerfile", ".github/workflows/ci.yml"]
        )
        assert {"terraform", "kubernetes", "docker", "ci"} <= set(context.infrastructure_components)
        assert context.affected_file_types == [".tf", ".yaml", "dockerfile"]
        assert context.import_patterns == []

    async def test_architectural_paths(self, make_reader):
        analyzer = ContextAnalyzer(reader=make_reader())
        context = await analyzer.analyze_context(
            ["src/controllers/user.go", "src/models/user.go", "src/commands/create.go", "src/queries/get.go"]
        )
        assert "mvc" in context.architectural_patterns
        assert "cqrs" in context.architectural_patterns
        assert "go" in context.technology_stack

    async def test_unreadable_file_contributes_nothing(self, make_reader):
        reader = make_reader({"src/app.ts": APP_TS})
        analyzer = ContextAnalyzer(reader=reader)

        context = await analyzer.analyze_context(["src/app.ts", "src/missing.ts"])

        assert "react" in context.import_patterns
        assert len(reader.calls) == 2

    async def test_scans_at_most_ten_files(self, make_reader):
        reader = make_reader()
        analyzer = ContextAnalyzer(reader=reader)

        await analyzer.analyze_context([f"src/file_{i}.ts" for i in range(12)])

        assert len(reader.calls) == MAX_SCANNED_FILES == 10

    async def test_empty_file_list(self, make_reader):
        reader = make_reader()
        context = await ContextAnalyzer(reader=reader).analyze_context([])
        assert context.to_dict() == {
            "affected_file_types": [],
            "import_patterns": [],
            "architectural_patterns": [],
            "technology_stack": [],
            "infrastructure_components": [],
        }
        assert reader.calls == []

    async def test_analyze_task_context(self, make_reader):
        analyzer = ContextAnalyzer(reader=make_reader({"src/app.ts": APP_TS}))
        context = await analyzer.analyze_task_context(TaskContext(affected_files=["src/app.ts"]))
        assert "react" in context.import_patterns


class TestContextCache:
    async def test_identical_list_not_reread(self, make_reader):
        reader = make_reader({"src/app.ts": APP_TS, "src/db.py": DB_PY})
        analyzer = ContextAnalyzer(reader=reader)

        first = await analyzer.analyze_context(["src/app.ts", "src/db.py"])
        second = await analyzer.analyze_context(["src/app.ts", "src/db.py"])

        assert first == second
        assert len(reader.calls) == 2
        assert analyzer.get_cache_size() == 1

    async def test_cached_result_not_shared(self, make_reader):
        analyzer = ContextAnalyzer(reader=make_reader({"a/b.py": DB_PY}))

        first = await analyzer.analyze_context(["a/b.py"])
        first.affected_file_types.append("poison")
        first.import_patterns.clear()
        second = await analyzer.analyze_context(["a/b.py"])
        second.technology_stack.append("poison")
        third = await analyzer.analyze_context(["a/b.py"])

        assert second.affected_file_types == [".py"]
        assert second.import_patterns
        assert "poison" not in third.technology_stack
        assert third.import_patterns == second.import_patterns

    async def test_different_list_reread(self, make_reader):
        reader = make_reader({"src/app.ts": APP_TS, "src/db.py": DB_PY})
        analyzer = ContextAnalyzer(reader=reader)

        await analyzer.analyze_context(["src/app.ts", "src/db.py"])
        await analyzer.analyze_context(["src/db.py", "src/app.ts"])

        assert len(reader.calls) == 4
        assert analyzer.get_cache_size() == 2

    async def test_clear_cache(self, make_reader):
        reader = make_reader({"src/app.ts": APP_TS})
        analyzer = ContextAnalyzer(reader=reader)

        await analyzer.analyze_context(["src/app.ts"])
        analyzer.clear_cache()
        assert analyzer.get_cache_size() == 0

        await analyzer.analyze_context(["src/app.ts"])
        assert len(reader.calls) == 2

    async def test_cache_key_order_sensitive(self):
        assert cache_key(["a", "b"]) != cache_key(["b", "a"])
        assert cache_key(["ab"]) != cache_key(["a", "b"])
        assert cache_key(["a", "b"]) == cache_key(["a", "b"])
