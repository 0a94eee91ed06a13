from .step_00_validate_manifest import ValidateManifestStep
from .step_05_stage_root import StageRootStep
from .step_10_start_hook import StartHookStep
from .step_20_write_servers import WriteServersStep
from .step_30_stage_config import StageConfigStep
from .step_35_write_splash import WriteSplashStep
from .step_40_stage_mods import StageModsStep
from .step_50_fetch_mods import FetchModsStep
from .step_90_finish_hook import FinishHookStep

__all__ = [
    "ValidateManifestStep",
    "StageRootStep",
    "StartHookStep",
    "WriteServersStep",
    "StageConfigStep",
    "WriteSplashStep",
    "StageModsStep",
    "FetchModsStep",
    "FinishHookStep",
]
