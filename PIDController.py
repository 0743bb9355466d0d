class PIDController:
    def __init__(self, kp, ki, kd, output_limit=1.0):
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.output_limit = output_limit

        self.prev_error = 0
        self.integral = 0
        self.derivative = 0

    def update(self, error, dt):

        self.integral += error * dt
        self.derivative = (error - self.prev_error) / dt

        output = (self.kp * error) + (self.ki * self.integral) + (self.kd * self.derivative)
        output = max(min(output, self.output_limit), -self.output_limit)

        self.prev_error = error
        return output

    def terms(self, error):
        """Individual P, I and D contributions of the last update."""
        return self.kp * error, self.ki * self.integral, self.kd * self.derivative

    def reset(self):
        self.prev_error = 0
        self.integral = 0
        self.derivative = 0

# Example usage:
# pid = PIDController(kp=10.0, ki=0.0, kd=0.5)
# output = pid.update(error=0.12, dt=0.01)
# print(output)
