"""
Unit tests for prebuildkit.core.environment.
"""

from pathlib import Path

import pytest

from prebuildkit.core.environment import BuildEnvironment, feature_name
from prebuildkit.core.exceptions import MissingEnvironmentError


class TestFeatureName:
    def test_lowercases_and_dashes(self):
        assert feature_name("CARGO_FEATURE_WITH_FFTW3") == "with-fftw3"

    def test_single_word(self):
        assert feature_name("CARGO_FEATURE_SHARED") == "shared"


class TestFromEnviron:
    """Tests for BuildEnvironment.from_environ."""

    def test_reads_required_variables(self, base_environ):
        env = BuildEnvironment.from_environ(base_environ)

        assert env.out_dir == Path(base_environ["OUT_DIR"])
        assert env.target == "x86_64-unknown-linux-gnu"
        assert env.profile == "release"
        assert env.num_jobs == 4
        assert env.features == frozenset()

    @pytest.mark.parametrize("variable", ["OUT_DIR", "TARGET", "PROFILE", "NUM_JOBS"])
    def test_missing_required_variable(self, base_environ, variable):
        del base_environ[variable]

        with pytest.raises(MissingEnvironmentError) as exc_info:
            BuildEnvironment.from_environ(base_environ)

        assert exc_info.value.variable == variable
        assert variable in str(exc_info.value)

    def test_empty_required_variable_counts_as_missing(self, base_environ):
        base_environ["OUT_DIR"] = ""

        with pytest.raises(MissingEnvironmentError):
            BuildEnvironment.from_environ(base_environ)

    def test_host_defaults_to_target(self, base_environ):
        del base_environ["HOST"]

        env = BuildEnvironment.from_environ(base_environ)

        assert env.host == env.target

    def test_invalid_num_jobs_falls_back_to_one(self, base_environ):
        base_environ["NUM_JOBS"] = "many"

        env = BuildEnvironment.from_environ(base_environ)

        assert env.num_jobs == 1

    def test_features_collected(self, base_environ):
        base_environ["CARGO_FEATURE_WITH_FFTW3"] = "1"
        base_environ["CARGO_FEATURE_SHARED"] = "1"

        env = BuildEnvironment.from_environ(base_environ)

        assert env.has_feature("with-fftw3")
        assert env.has_feature("shared")
        assert not env.has_feature("with-double")

    def test_snapshot_is_independent_of_source(self, base_environ):
        env = BuildEnvironment.from_environ(base_environ)
        base_environ["AUBIO_VERSION"] = "master"

        assert env.get("AUBIO_VERSION") is None


class TestBuildEnvironment:
    def test_get_treats_empty_as_unset(self, base_environ):
        base_environ["FFTW3_DIR"] = ""
        env = BuildEnvironment.from_environ(base_environ)

        assert env.get("FFTW3_DIR") is None
        assert env.get("FFTW3_DIR", "/opt") == "/opt"

    def test_is_debug(self, base_environ):
        base_environ["PROFILE"] = "debug"

        assert BuildEnvironment.from_environ(base_environ).is_debug

    def test_child_environ_applies_overrides_in_order(self, build_env):
        child = build_env.child_environ([("CC", "clang"), ("CC", "gcc")])

        assert child["CC"] == "gcc"
        assert child["PATH"] == "/usr/bin:/bin"
        assert "CC" not in build_env.environ
