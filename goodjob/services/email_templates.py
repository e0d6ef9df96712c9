"""
Email Templates

Each template checks its variables against a pydantic model, then renders
a subject line and an HTML body (jinja2, files under goodjob/templates/email/).
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, ValidationError

from goodjob.core.errors import EmailTemplateVariablesError
from goodjob.schemas.schemas import ExperienceViewLogNotificationVariables, SurveyVariables

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

_template_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def _validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in error.errors()
    )


class EmailTemplate:
    """Base class; subclasses set `template_name`, `variables_model` and the subject line."""

    template_name: str = ""
    variables_model: Optional[Type[BaseModel]] = None

    def validate_variables(self, variables: Dict[str, Any]) -> bool:
        if self.variables_model is None:
            return True
        try:
            self.variables_model.model_validate(variables)
        except ValidationError as e:
            raise EmailTemplateVariablesError(_validation_message(e))
        return True

    def gen_subject(self, variables: Dict[str, Any]) -> str:
        raise NotImplementedError

    def gen_body_html(self, variables: Dict[str, Any]) -> str:
        template = _template_env.get_template(self.template_name)
        return template.render(**variables)

    def render(self, variables: Dict[str, Any]) -> Tuple[str, str]:
        """Validate, then return (subject, html_body)."""
        self.validate_variables(variables)
        return self.gen_subject(variables), self.gen_body_html(variables)


class SurveyTemplate(EmailTemplate):
    template_name = "survey.html"
    variables_model = SurveyVariables

    def gen_subject(self, variables: Dict[str, Any]) -> str:
        return f"{variables['userName']}，邀請你填寫職場透明化運動的問卷"


class ExperienceViewLogNotificationTemplate(EmailTemplate):
    """Sent when an experience passes a view count threshold."""

    template_name = "experience_view_log_notification.html"
    variables_model = ExperienceViewLogNotificationVariables

    def gen_subject(self, variables: Dict[str, Any]) -> str:
        experience = variables["experience"]
        return f"你的{experience['typeName']}「{experience['title']}」已經有 {experience['viewCount']} 人看過了！"
