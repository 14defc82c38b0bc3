from dataclasses import dataclass, field
from typing import List, Optional
from omegaconf import DictConfig, OmegaConf
import os


@dataclass
class SamplerConfig:
    density: int = 500    # One candidate point per `density` pixels at 100% intensity
    min_points: int = 10


@dataclass
class ResizeConfig:
    width: int = 0
    height: int = 0


@dataclass
class PipelineConfig:
    workers: Optional[int] = None  # None lets the executor pick, 1 runs in-thread
    progress: bool = True


@dataclass
class OutputConfig:
    suffix: str = '-low-poly'
    jpeg_quality: int = 95


@dataclass
class PolyConfig:
    intensity: int = 100
    seed: Optional[int] = None
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    resize: ResizeConfig = field(default_factory=ResizeConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(config_path: Optional[str] = None, overrides: Optional[List[str]] = None) -> DictConfig:
    """Load configuration from file with optional overrides."""
    cfg = OmegaConf.structured(PolyConfig)
    if config_path and os.path.exists(config_path):
        cfg = OmegaConf.merge(cfg, OmegaConf.load(config_path))
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_cli(overrides))
    return cfg


def validate_config(cfg: DictConfig) -> None:
    """Validate configuration values."""
    assert 1 <= cfg.intensity <= 100, "intensity must be between 1 and 100"
    assert cfg.sampler.density > 0, "sampler.density must be positive"
    assert cfg.sampler.min_points >= 0, "sampler.min_points must be non-negative"
    assert cfg.resize.width >= 0, "resize.width must be non-negative"
    assert cfg.resize.height >= 0, "resize.height must be non-negative"
    assert cfg.pipeline.workers is None or cfg.pipeline.workers >= 1, "pipeline.workers must be at least 1"
    assert 1 <= cfg.output.jpeg_quality <= 100, "output.jpeg_quality must be between 1 and 100"
