"""Tests for simulator configuration."""

import pytest

from py_vmsim.config import ConfigError, SimulatorConfig
from py_vmsim.memory.replacement import ReplacementAlgorithm


class TestSimulatorConfig:
    """Verify defaults, validation, and derived values."""

    def test_defaults(self) -> None:
        """The default run uses Clock with 16 frames of 4 KiB."""
        config = SimulatorConfig()
        expected_frames = 16
        assert config.replacement_algorithm is ReplacementAlgorithm.CLOCK
        assert config.total_frames == expected_frames
        assert config.virtual_pages == expected_frames
        assert not config.test_mode
        assert config.seed is None

    def test_algorithm_name_is_normalised(self) -> None:
        """String algorithm names become enum members."""
        config = SimulatorConfig(replacement_algorithm="FIFO")  # type: ignore[arg-type]
        assert config.replacement_algorithm is ReplacementAlgorithm.FIFO

    def test_unknown_algorithm_raises(self) -> None:
        """Configuration rejects names that no algorithm has."""
        with pytest.raises(ConfigError, match="Unknown replacement algorithm"):
            SimulatorConfig(replacement_algorithm="lru")  # type: ignore[arg-type]

    def test_non_positive_size_raises(self) -> None:
        """Sizes must be positive."""
        with pytest.raises(ConfigError, match="page_size must be positive"):
            SimulatorConfig(page_size=0)
        with pytest.raises(ConfigError, match="max_ram_pages_per_process"):
            SimulatorConfig(max_ram_pages_per_process=-1)

    def test_sizes_must_be_page_multiples(self) -> None:
        """RAM and address space hold a whole number of pages."""
        with pytest.raises(ConfigError, match="not a multiple"):
            SimulatorConfig(ram_size=1000, page_size=256)

    def test_config_error_is_value_error(self) -> None:
        """ConfigError can be caught as ValueError."""
        assert issubclass(ConfigError, ValueError)

    def test_replace_validates(self) -> None:
        """replace() returns a new, validated config."""
        config = SimulatorConfig()
        smaller = config.replace(ram_size=8192)
        expected_frames = 2
        assert smaller.total_frames == expected_frames
        with pytest.raises(ConfigError):
            config.replace(page_size=-4)


class TestFromEnv:
    """Verify reading VMSIM_* variables."""

    def test_reads_all_variables(self) -> None:
        """Every variable maps to its field."""
        config = SimulatorConfig.from_env(
            {
                "VMSIM_RAM_SIZE": "2048",
                "VMSIM_PAGE_SIZE": "256",
                "VMSIM_VIRTUAL_ADDRESS_SPACE": "4096",
                "VMSIM_MAX_RAM_PAGES": "3",
                "VMSIM_REPLACEMENT": "random",
                "VMSIM_TEST_MODE": "yes",
                "VMSIM_SEED": "42",
                "UNRELATED": "ignored",
            }
        )
        assert config == SimulatorConfig(
            ram_size=2048,
            page_size=256,
            virtual_address_space=4096,
            max_ram_pages_per_process=3,
            replacement_algorithm=ReplacementAlgorithm.RANDOM,
            test_mode=True,
            seed=42,
        )

    def test_missing_variables_keep_defaults(self) -> None:
        """An empty mapping gives the default config."""
        assert SimulatorConfig.from_env({}) == SimulatorConfig()

    def test_defaults_to_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a mapping, os.environ is read."""
        monkeypatch.setenv("VMSIM_REPLACEMENT", "fifo")
        assert SimulatorConfig.from_env().replacement_algorithm is ReplacementAlgorithm.FIFO

    def test_bad_integer_raises(self) -> None:
        """Non-numeric sizes are rejected."""
        with pytest.raises(ConfigError, match="VMSIM_PAGE_SIZE must be an integer"):
            SimulatorConfig.from_env({"VMSIM_PAGE_SIZE": "big"})

    def test_bad_boolean_raises(self) -> None:
        """Unrecognised booleans are rejected."""
        with pytest.raises(ConfigError, match="VMSIM_TEST_MODE must be a boolean"):
            SimulatorConfig.from_env({"VMSIM_TEST_MODE": "maybe"})
