"""
Configuration Management for Nurse Shift Scheduler

Centralized configuration with validation and environment support.
"""

import json
import os
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigurationError


@dataclass
class SchedulingConfig:
    """Single-pass heuristic tuning"""
    consecutive_lookback_days: int = 10

    # Candidate ordering
    tie_threshold_hours: float = 2.0  # weighted-hour gaps at or below this are ties
    jitter_hours: float = 2.0         # +/- noise cap; applied as at most half the tie threshold
    prefer_continuity: bool = True

    # Dedicated-role off blocks pre-pass
    enable_dedicated_off_blocks: bool = True
    dedicated_off_ratio: float = 0.3  # used when the organization sets no monthly off days


@dataclass
class GenerationConfig:
    """Multi-pass candidate selection"""
    num_passes: int = 20
    max_generation_time_seconds: float = 30.0
    max_workers: int = 1
    seed: Optional[int] = None


@dataclass
class MonitoringConfig:
    """Performance monitoring configuration"""
    enable_monitoring: bool = True
    log_directory: str = "logs"
    save_session_logs: bool = True
    print_realtime_status: bool = True


@dataclass
class NurseSchedulerConfig:
    """Complete configuration for nurse scheduler"""
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    # File paths
    nurses_file: str = "data/nurses.json"
    organization_file: str = "data/organization.json"
    holidays_file: Optional[str] = None
    output_directory: str = "schedules"
    config_file: str = "config/scheduler_config.json"


class ConfigManager:
    """Manages configuration loading, validation, and environment overrides"""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or "config/scheduler_config.json"
        self.config = self._load_config()

    def _load_config(self) -> NurseSchedulerConfig:
        """Load configuration from file with environment overrides"""
        # Start with defaults
        config_dict = self._get_default_config()

        # Load from file if exists
        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, 'r') as f:
                    file_config = json.load(f)
                config_dict = self._merge_configs(config_dict, file_config)
            except (OSError, json.JSONDecodeError) as e:
                print(f"Warning: Could not load config file {self.config_file}: {e}")

        # Apply environment overrides
        config_dict = self._apply_env_overrides(config_dict)

        # Validate and create config object
        return self._dict_to_config(config_dict)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration as dictionary"""
        return asdict(NurseSchedulerConfig())

    def _merge_configs(self, base: Dict, override: Dict) -> Dict:
        """Recursively merge configuration dictionaries"""
        merged = base.copy()

        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _apply_env_overrides(self, config_dict: Dict) -> Dict:
        """Apply environment variable overrides"""
        # Generation configuration
        if "SCHEDULER_NUM_PASSES" in os.environ:
            config_dict.setdefault("generation", {})["num_passes"] = int(os.environ["SCHEDULER_NUM_PASSES"])

        if "SCHEDULER_SEED" in os.environ:
            config_dict.setdefault("generation", {})["seed"] = int(os.environ["SCHEDULER_SEED"])

        if "SCHEDULER_MAX_WORKERS" in os.environ:
            config_dict.setdefault("generation", {})["max_workers"] = int(os.environ["SCHEDULER_MAX_WORKERS"])

        if "SCHEDULER_TIME_BUDGET" in os.environ:
            config_dict.setdefault("generation", {})["max_generation_time_seconds"] = float(os.environ["SCHEDULER_TIME_BUDGET"])

        # Monitoring configuration
        if "SCHEDULER_DISABLE_MONITORING" in os.environ:
            config_dict.setdefault("monitoring", {})["enable_monitoring"] = False

        if "SCHEDULER_LOG_DIR" in os.environ:
            config_dict.setdefault("monitoring", {})["log_directory"] = os.environ["SCHEDULER_LOG_DIR"]

        # File paths
        if "SCHEDULER_NURSES_FILE" in os.environ:
            config_dict["nurses_file"] = os.environ["SCHEDULER_NURSES_FILE"]

        if "SCHEDULER_ORGANIZATION_FILE" in os.environ:
            config_dict["organization_file"] = os.environ["SCHEDULER_ORGANIZATION_FILE"]

        if "SCHEDULER_HOLIDAYS_FILE" in os.environ:
            config_dict["holidays_file"] = os.environ["SCHEDULER_HOLIDAYS_FILE"]

        if "SCHEDULER_OUTPUT_DIR" in os.environ:
            config_dict["output_directory"] = os.environ["SCHEDULER_OUTPUT_DIR"]

        return config_dict

    def _dict_to_config(self, config_dict: Dict) -> NurseSchedulerConfig:
        """Convert dictionary to typed configuration object"""
        try:
            return NurseSchedulerConfig(
                scheduling=SchedulingConfig(**config_dict.get("scheduling", {})),
                generation=GenerationConfig(**config_dict.get("generation", {})),
                monitoring=MonitoringConfig(**config_dict.get("monitoring", {})),
                nurses_file=config_dict.get("nurses_file", "data/nurses.json"),
                organization_file=config_dict.get("organization_file", "data/organization.json"),
                holidays_file=config_dict.get("holidays_file"),
                output_directory=config_dict.get("output_directory", "schedules"),
                config_file=config_dict.get("config_file", "config/scheduler_config.json")
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def save_config(self, config_file: Optional[str] = None):
        """Save current configuration to file"""
        file_path = config_file or self.config_file

        # Ensure directory exists
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(file_path, 'w') as f:
            json.dump(asdict(self.config), f, indent=2)

        print(f"Configuration saved to {file_path}")

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        # Validate file paths
        if not os.path.exists(self.config.nurses_file):
            issues.append(f"Nurses file not found: {self.config.nurses_file}")

        if not os.path.exists(self.config.organization_file):
            issues.append(f"Organization file not found: {self.config.organization_file}")

        if self.config.holidays_file and not os.path.exists(self.config.holidays_file):
            issues.append(f"Holidays file not found: {self.config.holidays_file}")

        # Validate scheduling configuration
        scheduling = self.config.scheduling
        if scheduling.consecutive_lookback_days <= 0:
            issues.append("consecutive_lookback_days must be positive")

        if scheduling.tie_threshold_hours < 0 or scheduling.jitter_hours < 0:
            issues.append("tie_threshold_hours and jitter_hours must be non-negative")

        if not 0 <= scheduling.dedicated_off_ratio <= 1:
            issues.append("dedicated_off_ratio must be between 0 and 1")

        # Validate generation configuration
        generation = self.config.generation
        if generation.num_passes <= 0:
            issues.append("num_passes must be positive")

        if generation.max_workers <= 0:
            issues.append("max_workers must be positive")

        if generation.max_generation_time_seconds <= 0:
            issues.append("max_generation_time_seconds must be positive")

        return issues

    def print_config_summary(self):
        """Print human-readable configuration summary"""
        print("\n" + "="*60)
        print("🔧 SCHEDULER CONFIGURATION")
        print("="*60)

        print(f"\n📋 SCHEDULING:")
        print(f"  Consecutive-day lookback: {self.config.scheduling.consecutive_lookback_days} days")
        print(f"  Tie threshold: {self.config.scheduling.tie_threshold_hours}h (jitter ±{self.config.scheduling.jitter_hours}h)")
        print(f"  Continuity preference: {self.config.scheduling.prefer_continuity}")
        print(f"  Dedicated off blocks: {self.config.scheduling.enable_dedicated_off_blocks}")

        print(f"\n⚡ GENERATION:")
        print(f"  Passes: {self.config.generation.num_passes}")
        print(f"  Time budget: {self.config.generation.max_generation_time_seconds}s")
        print(f"  Workers: {self.config.generation.max_workers}")
        print(f"  Seed: {self.config.generation.seed}")

        print(f"\n📁 FILES:")
        print(f"  Nurses: {self.config.nurses_file}")
        print(f"  Organization: {self.config.organization_file}")
        print(f"  Holidays: {self.config.holidays_file or '-'}")

        # Validation
        issues = self.validate_config()
        if issues:
            print(f"\n⚠️  CONFIGURATION ISSUES:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"\n✅ Configuration is valid")

        print("="*60)


# Convenience function for easy access
def load_config(config_file: Optional[str] = None) -> NurseSchedulerConfig:
    """Load and return scheduler configuration"""
    manager = ConfigManager(config_file)
    return manager.config
