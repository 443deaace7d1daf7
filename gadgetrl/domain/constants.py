from pathlib import Path

# Module groups
GROUP_SITE = "site"
GROUP_USER = "user"

# Freshness cache
BATCH_KEY_SEPARATOR = "|"

# Page kinds are inferred from this suffix when only a name is known
STYLE_PAGE_SUFFIX = ".css"

# Redirect hops followed for unreviewed content
DEFAULT_MAX_REDIRECTS = 1

# Configuration
CONFIG_DIRNAME = ".gadgetrl"
CONFIG_FILENAME = "config.yml"
DEFAULT_SNAPSHOT_PATH = Path(CONFIG_DIRNAME) / "site.yml"
