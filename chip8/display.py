from pygame import display, font, HWSURFACE, DOUBLEBUF, Color, draw

from chip8.screen import SCREEN_HEIGHT, SCREEN_WIDTH

SCREEN_NAME = 'CHIP8 Emulator'

# The depth of the screen is the number of bits used to represent the color
# of a pixel.
SCREEN_DEPTH = 8

# The colors of the pixels to draw. The Chip 8 supports two colors: 0 (off)
# and 1 (on). The format of the colors is in RGBA format.
PIXEL_COLORS = {
    0: Color(0, 0, 0, 255),
    1: Color(250, 250, 250, 255)
}

# The color and size of the debug overlay text
DEBUG_COLOR = Color(230, 41, 55, 255)
DEBUG_FONT_SIZE = 18


class Display(object):
    """
    Presents the Chip 8 pixel buffer in a pygame window. The original
    resolution of 64 x 32 is quite small, so every Chip 8 pixel is drawn as
    a square of scaling_ratio x scaling_ratio window pixels.
    """
    def __init__(self, ratio, screen_height=SCREEN_HEIGHT, screen_width=SCREEN_WIDTH):
        """
        :param ratio: the scaling factor to apply to the screen
        :param screen_height: the height of the Chip 8 screen
        :param screen_width: the width of the Chip 8 screen
        """
        self.screen_height = screen_height
        self.screen_width = screen_width
        self.scaling_ratio = ratio
        self.screen_surface = None
        self.debug_font = None

    def init_display(self):
        """
        Attempts to initialize a screen with the specified height and width.
        The screen will by default be of depth SCREEN_DEPTH, and will be
        double-buffered in hardware (if possible).
        """
        display.init()
        self.screen_surface = display.set_mode(
            ((self.screen_width * self.scaling_ratio),
             (self.screen_height * self.scaling_ratio)),
            HWSURFACE | DOUBLEBUF,
            SCREEN_DEPTH)
        display.set_caption(SCREEN_NAME)
        self.screen_surface.fill(PIXEL_COLORS[0])
        display.flip()

    def draw_screen_pixel(self, x_axis_position, y_axis_position, pixel_color):
        """
        Turn a pixel on or off at the specified location on the screen. Note
        that the pixel will not automatically be drawn on the screen, you
        must call update_screen() to flip the drawing buffer to the display.

        :param x_axis_position: the x coordinate to place the pixel
        :param y_axis_position: the y coordinate to place the pixel
        :param pixel_color: the color of the pixel to draw
        """
        x_axis_base_position = x_axis_position * self.scaling_ratio
        y_axis_base_position = y_axis_position * self.scaling_ratio
        draw.rect(self.screen_surface,
                  PIXEL_COLORS[pixel_color],
                  (x_axis_base_position, y_axis_base_position,
                   self.scaling_ratio, self.scaling_ratio))

    def render(self, screen_pixels):
        """
        Draws a whole frame from a snapshot of the pixel buffer.

        :param screen_pixels: rows of booleans, as returned by Screen.snapshot()
        """
        self.screen_surface.fill(PIXEL_COLORS[0])
        for y_axis_position, pixel_row in enumerate(screen_pixels):
            for x_axis_position, pixel in enumerate(pixel_row):
                if pixel:
                    self.draw_screen_pixel(x_axis_position, y_axis_position, 1)

    def draw_debug_info(self, frames_per_second, delay_timer):
        """
        Writes the frame rate and delay timer in the top left corner.
        """
        if self.debug_font is None:
            font.init()
            self.debug_font = font.Font(None, DEBUG_FONT_SIZE)
        lines = ['FPS: {:.0f}'.format(frames_per_second),
                 'Timer: {}'.format(delay_timer)]
        for line_number, line in enumerate(lines):
            text = self.debug_font.render(line, True, DEBUG_COLOR)
            self.screen_surface.blit(text, (5, 5 + line_number * DEBUG_FONT_SIZE))

    @staticmethod
    def update_screen():
        """
        Updates the display by swapping the back buffer and screen buffer.
        According to the pygame documentation, the flip should wait for a
        vertical retrace when both HWSURFACE and DOUBLEBUF are set on the
        surface.
        """
        display.flip()

    @staticmethod
    def close():
        display.quit()
