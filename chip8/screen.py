import threading

# The height and width of the screen in pixels
SCREEN_HEIGHT = 32
SCREEN_WIDTH = 64

# Every sprite row is one byte wide
SPRITE_WIDTH = 8


class Screen(object):
    """
    A class to emulate a Chip 8 Screen. The original Chip 8 screen was 64 x 32
    with 2 colors. In this emulator, this translates to a grid of booleans,
    where True is a lit pixel and False an unlit one.

    The screen is only written by the CPU. Presentation reads it through
    snapshot(), which takes the same lock as the drawing routines so that a
    frame never shows a partially drawn sprite.
    """
    def __init__(self, screen_height=SCREEN_HEIGHT, screen_width=SCREEN_WIDTH):
        """
        Initializes an empty pixel buffer.

        :param screen_height: the height of the screen
        :param screen_width: the width of the screen
        """
        self.screen_height = screen_height
        self.screen_width = screen_width
        self.screen_lock = threading.Lock()
        self.screen_pixels = self._blank_pixels()

    def _blank_pixels(self):
        return [[False] * self.screen_width for _ in range(self.screen_height)]

    def get_screen_pixel(self, x_axis_position, y_axis_position):
        """
        Returns whether the pixel is on (True) or off (False) at the specified
        location. The coordinate system starts with (0, 0) being in the top
        left of the screen.

        :param x_axis_position: the x coordinate to check
        :param y_axis_position: the y coordinate to check
        :return: the state of the specified pixel
        """
        return self.screen_pixels[y_axis_position][x_axis_position]

    def clear_screen(self):
        """
        Turns off all the pixels on the screen.
        """
        with self.screen_lock:
            self.screen_pixels = self._blank_pixels()

    def draw_sprite(self, x_axis_position, y_axis_position, sprite_rows):
        """
        XORs a sprite into the pixel buffer. Each sprite row is one byte, with
        the most significant bit being the leftmost pixel. Pixels that fall
        past the right or bottom edge of the screen are clipped, not wrapped.

        A collision happens when a lit sprite pixel lands on a pixel that is
        already lit, turning it off.

        :param x_axis_position: the column of the top left corner
        :param y_axis_position: the row of the top left corner
        :param sprite_rows: the bytes making up the sprite, top row first
        :return: True if any pixel collided
        """
        collision = False
        with self.screen_lock:
            for y_index, sprite_row in enumerate(sprite_rows):
                y_coord = y_axis_position + y_index
                if y_coord >= self.screen_height:
                    break
                pixel_row = self.screen_pixels[y_coord]

                for x_index in range(SPRITE_WIDTH):
                    x_coord = x_axis_position + x_index
                    if x_coord >= self.screen_width:
                        break
                    sprite_bit = (sprite_row >> (SPRITE_WIDTH - 1 - x_index)) & 0x1 == 0x1
                    current_bit = pixel_row[x_coord]
                    if sprite_bit and current_bit:
                        collision = True
                    pixel_row[x_coord] = sprite_bit != current_bit

        return collision

    def snapshot(self):
        """
        Returns a copy of the pixel buffer as a list of rows, for presentation.
        """
        with self.screen_lock:
            return [list(row) for row in self.screen_pixels]

    def __str__(self):
        return '\n'.join(
            ''.join('#' if pixel else '.' for pixel in row)
            for row in self.snapshot())
