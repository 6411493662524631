"""
Settings for the Soter pipeline scan.
"""

import os
import pathlib
from typing import Dict, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    confloat,
    constr,
    field_validator
)

import yaml

from flexi_settings import include

from .exceptions import ConfigurationError
from .models import ReportKind


#: The environment variable that points to a configuration file
CONFIG_FILE_VAR = 'SOTER_SCAN_CONFIG'

#: The prefix for environment variables that override individual settings
ENV_PREFIX = 'SOTER_SCAN_'


def default_outputs():
    """
    Returns the default file name for each report.
    """
    outputs = {
        ReportKind.VULNERABILITIES: 'anchore_security.json',
        ReportKind.POLICY_EVALUATION: 'anchore_gates.json',
    }
    for kind in ReportKind:
        outputs.setdefault(kind, f'anchore_{kind.value}.json')
    return outputs


class ScanSettings(BaseModel):
    """
    Model defining settings for a pipeline scan.
    """
    model_config = ConfigDict(frozen = True)

    #: The base URL of the analysis service API, e.g. https://anchore.example.com/v1
    url: constr(strip_whitespace = True, min_length = 1)
    #: The username for the analysis service
    username: constr(min_length = 1)
    #: The password for the analysis service
    password: SecretStr
    #: The image to analyse
    image: constr(strip_whitespace = True, min_length = 1)
    #: The policy bundle to evaluate against
    #: If not given, the active bundle for the account is used
    policy_bundle_id: Optional[constr(strip_whitespace = True)] = None
    #: The maximum time to wait for analysis to complete, in minutes
    analysis_timeout: confloat(gt = 0) = 10
    #: The time to wait between analysis status checks, in seconds
    poll_interval: confloat(gt = 0) = 10
    #: The timeout for individual HTTP requests, in seconds
    request_timeout: confloat(gt = 0) = 30
    #: The directory that report files are written to
    output_dir: pathlib.Path = pathlib.Path('.')
    #: The file name for each report, relative to the output directory
    outputs: Dict[ReportKind, pathlib.Path] = Field(default_factory = default_outputs, validate_default = True)

    @field_validator('policy_bundle_id')
    @classmethod
    def empty_bundle_is_none(cls, value):
        # An empty bundle id means "use the active bundle"
        return value or None

    @field_validator('outputs', mode = 'before')
    @classmethod
    def merge_default_outputs(cls, outputs):
        # Any outputs that are not given use the default names
        return dict(default_outputs(), **(outputs or {}))

    def output_paths(self):
        """
        Returns the resolved output path for each report kind.
        """
        return { kind: self.output_dir / path for kind, path in self.outputs.items() }


def from_environ(environ = None):
    """
    Returns a dictionary of settings from ``SOTER_SCAN_*`` environment variables.
    """
    environ = os.environ if environ is None else environ
    fields = set(ScanSettings.model_fields) - {'outputs'}
    config = {}
    for var_name, var_value in environ.items():
        if not var_name.startswith(ENV_PREFIX):
            continue
        name = var_name[len(ENV_PREFIX):].lower()
        if name in fields:
            config[name] = var_value
        elif name.startswith('output_'):
            # Per-report outputs are given as e.g. SOTER_SCAN_OUTPUT_CONTENT_OS
            config.setdefault('outputs', {})[name[len('output_'):]] = var_value
    return config


def load(overrides = None, environ = None):
    """
    Build a settings object from the config file, environment and overrides.

    Each source takes precedence over the one before it. Overrides with a value of
    None are ignored, so that unset command line options do not mask other sources.
    """
    environ = os.environ if environ is None else environ
    config = dict()
    config_file = environ.get(CONFIG_FILE_VAR)
    if config_file:
        try:
            include(config_file, config)
        except (OSError, SyntaxError, ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(f'could not load {config_file}: {exc}') from exc
    for source in (from_environ(environ), overrides or {}):
        for key, value in source.items():
            if value is None:
                continue
            if key == 'outputs':
                config['outputs'] = dict(config.get('outputs') or {}, **value)
            else:
                config[key] = value
    # Only pass on the keys that are settings, as a config file may define helpers
    config = { k: v for k, v in config.items() if k in ScanSettings.model_fields }
    try:
        return ScanSettings(**config)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
