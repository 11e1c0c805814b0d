import os
import pathlib
import platform
from typing import Optional

from temporalio.client import Client
from temporalio.envconfig import ClientConfig

from minelog.settings import Settings


# Connects to Temporal for the game recording pipeline. A named profile
# from temporal.toml wins over the plain address/namespace settings.
async def get_temporal_client(settings: Optional[Settings] = None) -> Client:
    settings = settings or Settings.from_env()
    config_file_path = get_config_file_path()
    if settings.temporal_profile and config_file_path.is_file():
        connect_config = ClientConfig.load_client_connect_config(
            profile=settings.temporal_profile,
            config_file=str(config_file_path),
        )
        return await Client.connect(**connect_config)
    return await Client.connect(
        settings.temporal_address,
        namespace=settings.temporal_namespace,
    )


# Platform default location of temporal.toml.
def get_config_file_path() -> pathlib.Path:
    home = pathlib.Path.home()
    system = platform.system()

    if system == "Darwin":
        return home / "Library/Application Support/temporalio/temporal.toml"
    if system == "Windows":
        app_data = os.getenv("AppData")
        if app_data is None:
            raise RuntimeError("AppData environment variable not set")
        return pathlib.Path(app_data) / "temporalio/temporal.toml"

    xdg_config_home = os.getenv("XDG_CONFIG_HOME")
    if xdg_config_home:
        return pathlib.Path(xdg_config_home) / "temporalio/temporal.toml"
    return home / ".config/temporalio/temporal.toml"
