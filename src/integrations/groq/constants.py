# groq/constants.py

MODEL_CONFIGURATIONS = {
    'complex': {
        'primary': {
            'name': 'llama-3.3-70b-versatile',
            'default_temperature': 0.2,
            'max_tokens': 1200,
            'recommended_tasks': ['task_extraction', 'email_triage']
        },
        'fallback': {
            'name': 'llama-3.1-8b-instant',
            'default_temperature': 0.2,
            'max_tokens': 1200,
            'recommended_tasks': ['task_extraction']
        }
    }
}

# Default settings for different task types
TASK_SETTINGS = {
    'task_extraction': {
        'complexity': 'complex',
        'temperature': 0.2,
    },
    'email_triage': {
        'complexity': 'complex',
        'temperature': 0.4,
    },
}
