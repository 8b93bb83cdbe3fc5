# config/parser_config.py

PARSER_CONFIG = {
    "task_extractor": {
        "model": {
            "task_type": "task_extraction",
            "max_tokens": 1200,
        },
        # Total deadline for the generation pathway, retries included
        "timeout": 25,
        "retry_count": 1,
        "retry_delay": 1,
        "max_tasks": 10,
        "default_confidence": 0.5,
        "default_priority": 3,
        "default_status": "doing",
    },
    "fallback_parser": {
        "confidence": 0.3,
        "due_hour": 17,
        "default_priority": 3,
        "urgent_priority": 1,
    },
    "email_triage": {
        "model": {
            "task_type": "email_triage",
            "max_tokens": 1000,
        },
        "timeout": 30,
        "retry_count": 1,
        "retry_delay": 1,
        "max_body_chars": 3000,
        "min_sections": 2,
        "max_sections": 4,
        "default_team_name": "Our Team",
    },
}
