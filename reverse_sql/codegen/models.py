import logging
from typing import List, Optional

from jinja2 import Environment

from ..constants import DefaultConfig, GenerationOptions
from ..domain.models import ClassDefinition
from .base import render_template, setup_jinja_env


logger = logging.getLogger(__name__)


def generate_models_code(
    classes: List[ClassDefinition],
    namespace: str = DefaultConfig.NAMESPACE,
    env: Optional[Environment] = None,
) -> str:
    """Generates the C# source for the model classes."""
    logger.debug(f"Rendering {len(classes)} model classes.")
    context = {
        "namespace": namespace,
        "usings": GenerationOptions.MODEL_USINGS,
        "classes": classes,
    }
    return render_template(env or setup_jinja_env(), GenerationOptions.MODELS_TEMPLATE, context)
