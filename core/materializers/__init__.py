# Importing the modules registers the materializers.
from core.materializers import git_materializer, noop_materializer  # noqa: F401
