"""
Writing side of twixter: posting to the local feed and following sources.
"""

import subprocess
from pathlib import Path

from twixter.config import Config
from twixter.exceptions import ConfigError, HookError
from twixter.logger import get_logger
from twixter.models import Entry

logger = get_logger(__name__)


def compose_post(content: str) -> str:
    """Format content as a twtxt record stamped with the current time."""
    return Entry.compose(content).serialize()


def run_hook(command: str) -> None:
    """Run a tweet hook through ``sh -c``.

    Args:
        command: Shell command; empty commands are skipped

    Raises:
        HookError: If the command exits with a non-zero status
    """
    if not command:
        return

    logger.debug(f"Running hook: {command}")
    completed = subprocess.run(
        ["sh", "-c", command],
        capture_output=True,
        text=True,
    )
    if completed.returncode != 0:
        raise HookError(command, completed.returncode, completed.stderr)


def publish(config: Config, content: str) -> Entry:
    """Append a new post to the local feed file.

    Runs ``pre_tweet_hook`` before and ``post_tweet_hook`` after writing.

    Args:
        config: Loaded configuration
        content: Post text

    Returns:
        The entry that was written

    Raises:
        ValueError: If the content is empty or spans several lines
        HookError: If a hook fails
        ConfigError: If the twtxt section is missing
        OSError: If the feed file cannot be written
    """
    twtxt = config.require_twtxt()

    if not content.strip():
        raise ValueError("post content must not be empty")
    if "\n" in content or "\r" in content:
        raise ValueError("post content must be a single line")

    run_hook(twtxt.pre_tweet_hook)

    entry = Entry.compose(content)
    twtfile = Path(twtxt.twtfile)
    twtfile.parent.mkdir(parents=True, exist_ok=True)
    with twtfile.open("a", encoding="utf-8", newline="") as f:
        f.write(entry.serialize())
    logger.info(f"Appended post to {twtfile}")

    run_hook(twtxt.post_tweet_hook)
    return entry


def follow(config_path: str, nick: str, url: str) -> dict[str, str]:
    """Add or replace a followed source in the configuration file.

    Args:
        config_path: YAML configuration file to update
        nick: Nickname to store the source under
        url: Feed URL

    Returns:
        The updated following mapping

    Raises:
        ConfigError: If the file is missing or not a YAML mapping
    """
    import yaml

    path = Path(config_path).expanduser()
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")

    following = data.get("following") or {}
    if not isinstance(following, dict):
        raise ConfigError(f"following in {path} must be a mapping of nick to URL")
    if nick in following:
        logger.info(f"Replacing URL of {nick}: {following[nick]} -> {url}")
    following[nick] = url
    data["following"] = following

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)

    logger.info(f"Now following {nick} ({url})")
    return following
