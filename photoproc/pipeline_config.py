"""
PipelineConfig - Local processing settings for the derivative pipeline.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class PipelineConfig:
    """
    Attributes:
        tmp_root: Parent directory for scratch directories (None for system temp)
        convert_command: ImageMagick executable used for pyramid encoding
        convert_timeout: Seconds allowed for a single pyramid encode
        max_pixels: Largest original accepted, in pixels
    """
    tmp_root: Optional[str] = None
    convert_command: str = 'convert'
    convert_timeout: float = 300.0
    max_pixels: int = 268402689
    
    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        return cls(
            tmp_root=os.getenv('PHOTOPROC_TMP_ROOT') or None,
            convert_command=os.getenv('PHOTOPROC_CONVERT_COMMAND', 'convert'),
            convert_timeout=float(os.getenv('PHOTOPROC_CONVERT_TIMEOUT', '300')),
            max_pixels=int(os.getenv('PHOTOPROC_MAX_PIXELS', '268402689')),
        )
    
    def validate(self) -> List[str]:
        errors = []
        if self.tmp_root and not os.path.isdir(self.tmp_root):
            errors.append(f"PHOTOPROC_TMP_ROOT does not exist: {self.tmp_root}")
        if self.convert_timeout <= 0:
            errors.append("PHOTOPROC_CONVERT_TIMEOUT must be positive")
        if self.max_pixels <= 0:
            errors.append("PHOTOPROC_MAX_PIXELS must be positive")
        return errors
