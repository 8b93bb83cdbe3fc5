from typing import Dict, Optional
from .constants import MODEL_CONFIGURATIONS, TASK_SETTINGS


class ModelManager:
    def __init__(self, force_model: Optional[str] = None, use_fallback_models: bool = False):
        """
        Initialize the ModelManager.

        Args:
            force_model: Model name to use for every task type
            use_fallback_models: Prefer each tier's fallback model
        """
        self.force_model = force_model
        self.use_fallback_models = use_fallback_models

    def get_model_config(self, task_type: str, force_model: Optional[str] = None) -> Dict:
        """
        Get the model configuration for a task.

        Args:
            task_type: Type of task (e.g., 'task_extraction')
            force_model: Optional specific model to use

        Returns:
            Dict with 'name', 'temperature' and 'max_tokens'
        """
        task_settings = TASK_SETTINGS.get(task_type)
        if not task_settings:
            raise ValueError(f"Unknown task type: {task_type}")

        forced = force_model or self.force_model
        if forced:
            for complexity in MODEL_CONFIGURATIONS.values():
                for model_type in complexity.values():
                    if model_type['name'] == forced:
                        return self._resolve(model_type, task_settings)
            raise ValueError(f"Forced model {forced} not found in configurations")

        models = MODEL_CONFIGURATIONS[task_settings['complexity']]
        model = models['fallback'] if self.use_fallback_models else models['primary']
        return self._resolve(model, task_settings)

    def _resolve(self, model: Dict, task_settings: Dict) -> Dict:
        return {
            'name': model['name'],
            'temperature': task_settings.get('temperature', model['default_temperature']),
            'max_tokens': model['max_tokens'],
        }
