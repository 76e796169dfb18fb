# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import json
import os
import subprocess
import sys
from typing import Dict
from typing import List
from typing import Optional

import pytest

from embuild_kconfig.core import PropagationNotFoundError
from embuild_kconfig.core import main

TEST_FILES_PATH = os.path.abspath(os.path.dirname(__file__))
SDKCONFIGS_PATH = os.path.join(TEST_FILES_PATH, "sdkconfigs")
ESP32_SDKCONFIG = os.path.join(SDKCONFIGS_PATH, "sdkconfig.esp32")

ESP32_FLAGS = [
    "cargo:rustc-cfg=esp_idf_config_esptoolpy_flashmode_dio",
    "cargo:rustc-cfg=esp_idf_config_esp_wifi_enabled",
    "cargo:rustc-cfg=esp_idf_config_lwip_ipv6",
]


def run(args: List[str], env: Optional[Dict[str, str]] = None) -> subprocess.CompletedProcess:
    full_env = os.environ.copy()
    for name in [name for name in full_env if name.startswith("DEP_") or name.startswith("EMBUILD_")]:
        del full_env[name]
    full_env.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "embuild_kconfig"] + args, capture_output=True, text=True, env=full_env
    )


class TestCommandLine:
    def test_output(self) -> None:
        result = run(["--config", ESP32_SDKCONFIG, "--prefix", "esp_idf", "--output"])
        assert result.returncode == 0, result.stderr
        assert result.stdout.splitlines() == ESP32_FLAGS

    def test_propagate(self) -> None:
        result = run(["--config", ESP32_SDKCONFIG, "--prefix", "ESP_IDF", "--propagate"])
        assert result.returncode == 0, result.stderr
        assert result.stdout.splitlines() == [
            "cargo:EMBUILD_CFG_ARGS="
            "esp_idf_config_esptoolpy_flashmode_dio:esp_idf_config_esp_wifi_enabled:esp_idf_config_lwip_ipv6"
        ]

    def test_output_propagated(self) -> None:
        result = run(
            ["--output-propagated", "esp_idf"],
            env={"DEP_esp_idf_EMBUILD_CFG_ARGS": "esp_idf_a:esp_idf_b"},
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout.splitlines() == ["cargo:rustc-cfg=esp_idf_a", "cargo:rustc-cfg=esp_idf_b"]

    def test_missing_propagation_is_fatal(self) -> None:
        result = run(["--output-propagated", "esp_idf"])
        assert result.returncode == 2
        assert result.stdout == ""
        assert "A fatal error occurred" in result.stderr
        assert "DEP_esp_idf_EMBUILD_CFG_ARGS" in result.stderr

    def test_missing_config_is_fatal(self, tmp_path) -> None:
        result = run(["--config", os.path.join(str(tmp_path), "sdkconfig"), "--prefix", "x", "--output"])
        assert result.returncode == 2
        assert result.stdout == ""
        assert "A fatal error occurred" in result.stderr

    def test_config_and_prefix_from_environment(self) -> None:
        result = run(["--output"], env={"KCONFIG_CONFIG": ESP32_SDKCONFIG, "EMBUILD_KCONFIG_PREFIX": "esp_idf"})
        assert result.returncode == 0, result.stderr
        assert result.stdout.splitlines() == ESP32_FLAGS

    def test_nothing_to_do(self) -> None:
        result = run(["--config", ESP32_SDKCONFIG])
        assert result.returncode != 0
        assert "nothing to do" in result.stderr


class TestMain:
    @pytest.fixture(autouse=True)
    def clean_environment(self):
        # main() applies --env and --env-file to os.environ directly
        saved = dict(os.environ)
        for name in list(os.environ):
            if name.startswith("DEP_") or name.startswith("EMBUILD_") or name == "KCONFIG_CONFIG":
                del os.environ[name]
        yield
        os.environ.clear()
        os.environ.update(saved)

    def test_output_and_propagate(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--config", ESP32_SDKCONFIG, "--prefix", "esp_idf", "--output", "--propagate"]) == 0
        out, err = capsys.readouterr()
        lines = out.splitlines()
        assert lines[:3] == ESP32_FLAGS
        assert lines[3].startswith("cargo:EMBUILD_CFG_ARGS=esp_idf_config_esptoolpy_flashmode_dio:")
        assert "Enabled: 3 flags" in err
        assert "Propagated: 3 flags" in err
        # hex, int and empty values are reported as skipped
        assert "Skipped lines (3)" in err

    def test_quiet(self, capsys: pytest.CaptureFixture) -> None:
        main(["--config", ESP32_SDKCONFIG, "--prefix", "esp_idf", "--output", "--verbosity", "quiet"])
        _, err = capsys.readouterr()
        assert "Enabled" not in err
        assert "CONFIG_FREERTOS_HZ" in err

    def test_prefix_required(self, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as e:
            main(["--config", ESP32_SDKCONFIG, "--output"])
        assert e.value.code == 2
        out, err = capsys.readouterr()
        assert out == ""
        assert "--prefix" in err

    def test_env(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--env", "DEP_lib_EMBUILD_CFG_ARGS=lib_a", "--output-propagated", "lib"]) == 0
        out, _ = capsys.readouterr()
        assert out == "cargo:rustc-cfg=lib_a\n"

    def test_env_without_equal_sign(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--env", "DEP_lib_EMBUILD_CFG_ARGS", "--output-propagated", "lib"]) == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "--env arguments must each contain =" in err

    def test_env_file(self, tmp_path, capsys: pytest.CaptureFixture) -> None:
        env_file = tmp_path / "env.json"
        env_file.write_text(json.dumps({"KCONFIG_CONFIG": ESP32_SDKCONFIG, "EMBUILD_KCONFIG_PREFIX": "esp_idf"}))
        assert main(["--env-file", str(env_file), "--output"]) == 0
        out, _ = capsys.readouterr()
        assert out.splitlines() == ESP32_FLAGS

    def test_missing_propagation(self, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(PropagationNotFoundError):
            main(["--output-propagated", "esp_idf"])
        out, _ = capsys.readouterr()
        assert out == ""
