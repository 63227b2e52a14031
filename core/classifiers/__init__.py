# Importing the modules registers the classifiers.
from core.classifiers import suffix_classifier  # noqa: F401
