"""
Declarative table of the external tool's operations.

Each entry maps an operation name to the executable setting it uses, the
argument template, and the rule that decides failure. Adding an operation
means adding a row here; the runner is not touched.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple, Type

from ..executor.process_control import quote_argument
from ..validation import (
    ContentError,
    ToolVersionCheckFailure,
    ValidationError,
    validate_non_empty_string,
)

SECRET_MASK = "********"


@dataclass(frozen=True)
class OperationTemplate:
    """
    One operation of the external tool.
    """

    name: str
    # str.format template; every placeholder must be listed in ``parameters``.
    arguments: str
    parameters: Tuple[str, ...] = ()
    # Parameters replaced by SECRET_MASK in logged command lines.
    secret_parameters: Tuple[str, ...] = ()
    # Name of the DockerConfig attribute holding the executable.
    executable_setting: str = "executable"
    # Fail on any stderr output instead of on the error marker.
    fail_on_stderr: bool = False
    # Prefix forwarded status lines with DockerConfig.login_status_prefix.
    prefix_status: bool = False
    # Raised by CommandResult.raise_for_failure() when the operation fails.
    error_class: Type[ContentError] = ContentError

    def render(self, params: Mapping[str, str], mask_secrets: bool = False) -> str:
        """
        Substitute quoted parameter values into the argument template.

        Args:
            params: Values for every name in ``parameters``
            mask_secrets: Replace secret values with SECRET_MASK (for logging)

        Returns:
            The argument string

        Raises:
            ValidationError: On missing, unexpected, or empty parameters
        """
        missing = [name for name in self.parameters if name not in params]
        if missing:
            raise ValidationError(
                f"Operation '{self.name}' is missing parameters: {', '.join(missing)}",
                field_name=missing[0],
            )
        unexpected = sorted(set(params) - set(self.parameters))
        if unexpected:
            raise ValidationError(
                f"Operation '{self.name}' does not accept parameters: {', '.join(unexpected)}",
                field_name=unexpected[0],
            )

        values = {}
        for name in self.parameters:
            value = validate_non_empty_string(params[name], field_name=name)
            if mask_secrets and name in self.secret_parameters:
                values[name] = SECRET_MASK
            else:
                values[name] = quote_argument(value)
        return self.arguments.format(**values)


OPERATIONS: Dict[str, OperationTemplate] = {
    "version": OperationTemplate(
        name="version",
        arguments="--version",
        executable_setting="version_check_executable",
        fail_on_stderr=True,
        error_class=ToolVersionCheckFailure,
    ),
    "build": OperationTemplate(
        name="build",
        arguments="build -t {registry}/{image_repo}:{tag} .",
        parameters=("registry", "image_repo", "tag"),
    ),
    "push": OperationTemplate(
        name="push",
        arguments="push {registry}/{image_repo}:{tag}",
        parameters=("registry", "image_repo", "tag"),
    ),
    "login": OperationTemplate(
        name="login",
        arguments="login -u {username} --password {password} {registry_url}",
        parameters=("username", "password", "registry_url"),
        secret_parameters=("password",),
        prefix_status=True,
    ),
}


def get_operation(name: str) -> OperationTemplate:
    """
    Look up an operation by name.

    Raises:
        ValidationError: If no such operation is defined
    """
    try:
        return OPERATIONS[name]
    except KeyError:
        raise ValidationError(
            f"Unknown operation '{name}'. Available: {', '.join(sorted(OPERATIONS))}",
            field_name="operation",
            value=name,
        ) from None
