# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for StructlogAdapter: default LoggingPort implementation."""

import logging

from flycache.core.config import Config
from flycache.logging.port import LoggingPort
from flycache.logging.structlog_adapter import StructlogAdapter


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flycache": {"logging": {"level": {"root": "DEBUG"}}}}))
        assert adapter._root_level == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_reads_format(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flycache": {"logging": {"format": "json"}}}))
        assert adapter._format == "json"

    def test_configure_reads_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config({"flycache": {"logging": {"level": {"root": "INFO", "flycache.cache": "debug"}}}})
        adapter.configure(config)
        assert adapter._module_levels == {"flycache.cache": "DEBUG"}
        assert logging.getLogger("flycache.cache").level == logging.DEBUG

    def test_stdlib_records_are_rendered_as_json(self, capsys):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flycache": {"logging": {"format": "json"}}}))
        logging.getLogger("flycache.cache.adapters.redis").warning("pool exhausted")
        out = capsys.readouterr().out
        assert '"event": "pool exhausted"' in out
        assert '"logger": "flycache.cache.adapters.redis"' in out


class TestStructlogAdapterGetLogger:
    def test_get_logger_returns_bound_logger(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        logger = adapter.get_logger("flycache.test")
        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "debug", None))

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("flycache.codec", "warning")
        assert logging.getLogger("flycache.codec").level == logging.WARNING
