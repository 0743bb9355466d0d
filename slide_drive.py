from dataclasses import dataclass

from config import (GRAVITY, NUM_SLIDES, PAYLOAD_MASS, PULLEY_RADIUS, SLIDE_LENGTH,
                    SLIDE_MASS, SLIDE_STROKE, TORQUE_STALL, W_NO_LOAD)


@dataclass(frozen=True)
class SlideConfig:
    """Physical constants of a slide stack driven by one motor on a pulley.

    Default values describe 3 MiSUMi slides (SARC210) in series with one
    goBILDA Yellow Jacket (435 RPM) and a goBILDA pulley turning rotational
    motion into linear motion.
    """
    num_slides: int = NUM_SLIDES
    slide_length: float = SLIDE_LENGTH  # m
    slide_stroke: float = SLIDE_STROKE  # m
    slide_mass: float = SLIDE_MASS  # kg
    payload_mass: float = PAYLOAD_MASS  # kg
    torque_stall: float = TORQUE_STALL  # Nm
    radius: float = PULLEY_RADIUS  # m
    w_no_load: float = W_NO_LOAD  # rad/s
    gravity: float = 0.0  # m/s^2, 0 for a horizontal slide

    @classmethod
    def horizontal(cls, **overrides):
        return cls(**overrides)

    @classmethod
    def vertical(cls, **overrides):
        overrides.setdefault('gravity', GRAVITY)
        return cls(**overrides)

    @property
    def max_stroke(self):
        return self.num_slides * self.slide_stroke

    @property
    def starting_length(self):
        return self.slide_length - self.slide_stroke

    @property
    def max_length(self):
        return self.starting_length + self.max_stroke

    @property
    def travel_mid(self):
        return self.max_length / 2

    @property
    def total_mass(self):
        return self.payload_mass + (self.num_slides * self.slide_mass)


class SlideDrive:
    """Simulates the slide carriage driven by a DC motor with a linear torque curve."""

    def __init__(self, cfg=None):
        """
        Initialize the slide.

        Args:
            cfg: SlideConfig with the physical constants (horizontal slide if None)
        """
        self.cfg = cfg if cfg is not None else SlideConfig.horizontal()

        # Carriage state
        self.position = self.cfg.starting_length  # m
        self.velocity = 0.0  # m/s
        self.acceleration = 0.0  # m/s^2
        self.hardstop_hit = False

    def motor_torque(self, output):
        """Motor torque for a normalized output in [-1, 1]."""
        cfg = self.cfg
        # Current angular velocity of the motor, signed by the commanded direction
        current_w = self.velocity / cfg.radius * (1.0 if output > 0 else -1.0)
        torque = cfg.torque_stall * output * (1 - (current_w / cfg.w_no_load))
        return max(min(torque, cfg.torque_stall), -cfg.torque_stall)

    def update(self, output, dt):
        """
        Update the carriage for one time step.

        Args:
            output: Normalized motor command in [-1, 1]
            dt: Time step (seconds)
        """
        cfg = self.cfg
        force = self.motor_torque(output) / cfg.radius  # N
        self.acceleration = (force / cfg.total_mass) - cfg.gravity  # m/s^2

        # Semi-implicit Euler
        self.velocity += self.acceleration * dt
        self.position += self.velocity * dt

    def apply_hardstop(self):
        """Clamp the carriage to the end of travel. Returns True if the stop was hit."""
        self.hardstop_hit = self.position > self.cfg.max_length
        if self.hardstop_hit:
            self.velocity = 0.0
            self.position = self.cfg.max_length
        return self.hardstop_hit

    def get_state(self):
        """Get current carriage state."""
        return {
            'position': self.position,
            'velocity': self.velocity,
            'acceleration': self.acceleration,
            'hardstop': self.hardstop_hit
        }

    def reset(self, position=None):
        """Reset the carriage to rest at a position (retracted if None)."""
        self.position = self.cfg.starting_length if position is None else position
        self.velocity = 0.0
        self.acceleration = 0.0
        self.hardstop_hit = False


# Example usage
if __name__ == "__main__":
    slide = SlideDrive(SlideConfig.horizontal())
    slide.reset(0.1)

    dt = 0.01
    time = 0.0

    print(f"{'Time':<8} {'Pos':<10} {'Vel':<10} {'Accel':<10}")
    print("-" * 40)

    while time < 0.5:
        slide.update(1.0, dt)
        slide.apply_hardstop()
        state = slide.get_state()
        print(f"{time:<8.2f} {state['position']:<10.3f} {state['velocity']:<10.3f} "
              f"{state['acceleration']:<10.3f}")
        time += dt
