import logging
import threading
import time

from chip8.exception import Chip8Exception, EmulatorFailureException

logger = logging.getLogger(__name__)

# The delay and sound timers count down 60 times per second
TIMER_FREQUENCY = 60

# Default number of instructions executed per second
DEFAULT_INSTRUCTIONS_PER_SECOND = 600


class Emulator(object):
    """
    Runs a CPU on two threads: one executes instructions at a fixed rate,
    the other decrements the timers at 60Hz. Both stop when stop() is called
    or when the CPU raises a fatal error. A presentation loop can watch
    is_running() to know when to shut down as well.
    """
    def __init__(self, cpu, instructions_per_second=DEFAULT_INSTRUCTIONS_PER_SECOND,
                 timer_frequency=TIMER_FREQUENCY):
        """
        :param cpu: the CPU to run, with a program already loaded
        :param instructions_per_second: the execution rate
        :param timer_frequency: how often the timers are decremented
        """
        if instructions_per_second <= 0:
            raise ValueError("instructions_per_second must be positive")
        self.cpu = cpu
        self.instruction_interval = 1.0 / instructions_per_second
        self.timer_interval = 1.0 / timer_frequency
        self.error = None
        self.stop_event = threading.Event()
        self.threads = []

    def start(self):
        """
        Starts the execution and timer threads.
        """
        if self.threads:
            raise RuntimeError("emulator already started")
        self.stop_event.clear()
        self.threads = [
            threading.Thread(target=self._run_cpu, name='chip8-cpu', daemon=True),
            threading.Thread(target=self._run_timers, name='chip8-timers', daemon=True),
        ]
        for thread in self.threads:
            thread.start()
        logger.info("Emulator started at %d instructions per second",
                    round(1.0 / self.instruction_interval))

    def stop(self):
        """
        Signals both threads to stop. Use join() to wait for them.
        """
        self.stop_event.set()

    def is_running(self):
        return not self.stop_event.is_set()

    def join(self, timeout=None):
        """
        Waits for both threads to finish. If the CPU stopped because of a
        fatal error, the error is raised here.

        :param timeout: the number of seconds to wait for each thread
        """
        for thread in self.threads:
            thread.join(timeout)
        if self.error is not None:
            raise self.error

    def _tick(self, interval, next_tick):
        """
        Sleeps until the next tick is due. Returns the time of the tick after
        it, or None if the emulator was stopped while waiting. A loop that
        falls behind schedule starts counting again from now instead of
        running a burst of catch-up ticks.
        """
        delay = next_tick - time.monotonic()
        if delay > 0 and self.stop_event.wait(delay):
            return None
        if self.stop_event.is_set():
            return None
        return max(next_tick, time.monotonic()) + interval

    def _run_cpu(self):
        logger.debug("Execution thread started")
        next_tick = time.monotonic()
        try:
            while True:
                next_tick = self._tick(self.instruction_interval, next_tick)
                if next_tick is None:
                    break
                self.cpu.cpu_execute_instruction()
        except Chip8Exception as error:
            self.error = error
        except Exception as error:
            logger.exception("Execution thread failed")
            self.error = EmulatorFailureException(error)
        finally:
            self.stop_event.set()
            self._silence()
            logger.debug("Execution thread stopped")

    def _silence(self):
        if self.cpu.cpu_audio is None:
            return
        try:
            self.cpu.cpu_audio.set_tone(False)
        except Exception as error:
            logger.warning("Unable to stop the tone", exc_info=True)
            if self.error is None:
                self.error = EmulatorFailureException(error)

    def _run_timers(self):
        logger.debug("Timer thread started")
        next_tick = time.monotonic()
        while True:
            next_tick = self._tick(self.timer_interval, next_tick)
            if next_tick is None:
                break
            self.cpu.cpu_decrement_timers()
        logger.debug("Timer thread stopped")
