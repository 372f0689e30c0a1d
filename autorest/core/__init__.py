"""Cross-cutting application functionality.

- **config**: Settings, profiles and database backend selection
- **context**: Correlation ID storage for the current request
- **exceptions**: Error hierarchy with codes and severities
- **error_context**: Redaction of sensitive values before logging
- **logging**: Loguru configuration and standard library interception
- **metrics**: In-process request metrics used by the actuator
- **observability**: OpenTelemetry tracing setup
"""
