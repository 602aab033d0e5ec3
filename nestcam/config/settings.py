import copy
import yaml
import os
from typing import Dict, Any

# Environment variables that override the secrets in the 'nest' section
ENV_OVERRIDES = {
    'API_KEY': 'api_key',
    'CLIENT_ID': 'client_id',
    'REFRESH_TOKEN': 'refresh_token',
    'CAMERA_ID': 'camera_id',
}

class Settings:
    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file, merged over the defaults"""
        config = self._default_config()
        try:
            with open(self.config_path, 'r') as file:
                loaded = yaml.safe_load(file) or {}
        except FileNotFoundError:
            loaded = {}
        self._merge(config, loaded)
        self._apply_env(config)
        return config

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = copy.deepcopy(value)

    def _apply_env(self, config: Dict[str, Any]) -> None:
        for env_name, key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                config['nest'][key] = value

    def _default_config(self) -> Dict[str, Any]:
        """Default configuration if file doesn't exist"""
        return {
            'nest': {
                'api_key': '',
                'client_id': '',
                'refresh_token': '',
                'camera_id': '',
                'request_timeout': 10
            },
            'endpoints': {
                'oauth_url': 'https://oauth2.googleapis.com/token',
                'session_token_url': 'https://nestauthproxyservice-pa.googleapis.com/v1/issue_jwt',
                'policy_id': 'authproxy-oauth-policy',
                'nexus_host': 'https://nexusapi-us1.camera.home.nest.com',
                'events': '/cuepoint/{camera_id}/2',
                'latest_image': '/get_image?uuid={camera_id}&width=640',
                'snapshot': '/event_snapshot/{camera_id}/'
            },
            'polling': {
                'snapshot_interval_ms': 5000,
                'event_interval_ms': 3000,
                'max_consecutive_failures': 0  # 0 disables the threshold
            },
            'output': {
                'snapshot_dir': './assets'
            },
            'logging': {
                'level': 'INFO',
                'file': 'nestcam.log',
                'dir': 'logs',
                'console': True
            }
        }

    def is_complete(self) -> bool:
        """True when every secret needed to talk to the Nest API is set"""
        nest = self.config['nest']
        return all(nest.get(key) for key in ENV_OVERRIDES.values())
