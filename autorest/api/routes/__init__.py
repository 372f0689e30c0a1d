"""HTTP routes: HAL resources, root index, configuration and actuator."""
