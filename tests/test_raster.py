import pytest
import numpy as np

from poly_convert.raster import (
    point_in_triangle, triangle_mask, bounding_box, covered_pixels,
    average_color, fill_triangle, rasterize
)


RED = np.array([255, 0, 0, 255], dtype=np.uint8)
BLUE = np.array([0, 0, 255, 255], dtype=np.uint8)


def solid_image(width, height, color=(255, 0, 0, 255), dtype=np.uint8):
    image = np.empty((height, width, 4), dtype=dtype)
    image[...] = color
    return image


class TestMembership:
    """Test cases for the point-in-triangle test."""
    
    def test_vertices_inside(self):
        """Test that each vertex lies inside its own triangle."""
        a, b, c = (0, 0), (10, 0), (0, 10)
        for p in (a, b, c):
            assert point_in_triangle(p[0], p[1], a, b, c)
    
    def test_vertices_inside_random_triangles(self):
        """Test vertex membership for arbitrary real-valued triangles."""
        rng = np.random.default_rng(0)
        for _ in range(100):
            a, b, c = rng.random((3, 2)) * 500
            for p in (a, b, c):
                assert point_in_triangle(p[0], p[1], a, b, c)
    
    def test_edges_inclusive(self):
        """Test that points on edges count as inside."""
        a, b, c = (0, 0), (10, 0), (0, 10)
        assert point_in_triangle(5, 0, a, b, c)
        assert point_in_triangle(0, 5, a, b, c)
        assert point_in_triangle(5, 5, a, b, c)
    
    def test_outside(self):
        """Test points outside the triangle."""
        a, b, c = (0, 0), (10, 0), (0, 10)
        assert not point_in_triangle(6, 6, a, b, c)
        assert not point_in_triangle(-1, 0, a, b, c)
        assert not point_in_triangle(0, 11, a, b, c)
    
    def test_degenerate_contains_nothing(self):
        """Test that collinear and coincident triangles contain no point."""
        assert not point_in_triangle(1, 1, (0, 0), (1, 1), (2, 2))
        assert not point_in_triangle(3, 3, (3, 3), (3, 3), (3, 3))
    
    def test_mask_matches_scalar(self):
        """Test that the vectorised test agrees with the scalar one."""
        a, b, c = (1.5, 2.0), (17.2, 4.4), (6.3, 15.9)
        ys, xs = np.mgrid[0:20, 0:20]
        mask = triangle_mask(xs.astype(float), ys.astype(float), a, b, c)
        
        for y in range(20):
            for x in range(20):
                assert mask[y, x] == point_in_triangle(x, y, a, b, c)


class TestBounds:
    """Test cases for bounding boxes and covered pixels."""
    
    def test_bounding_box_floor_ceil(self):
        """Test that the box floors the minimum and ceils the maximum."""
        assert bounding_box((0.5, 0.5), (2.2, 0.1), (1, 3.7)) == (0, 0, 3, 4)
    
    def test_covered_pixels_small_triangle(self):
        """Test the exact pixels covered by a unit right triangle."""
        ys, xs = covered_pixels((0, 0), (1, 0), (0, 1), 10, 10)
        assert sorted(zip(xs.tolist(), ys.tolist())) == [(0, 0), (0, 1), (1, 0)]
    
    def test_covered_pixels_clipped(self):
        """Test that pixels outside the buffer are never returned."""
        ys, xs = covered_pixels((-5, -5), (20, -5), (-5, 20), 8, 6)
        assert len(xs) > 0
        assert xs.min() >= 0 and xs.max() < 8
        assert ys.min() >= 0 and ys.max() < 6
    
    def test_covered_pixels_off_buffer(self):
        """Test a triangle entirely outside the buffer."""
        ys, xs = covered_pixels((100, 100), (110, 100), (100, 110), 10, 10)
        assert len(xs) == 0 and len(ys) == 0


class TestAverageColor:
    """Test cases for colour averaging."""
    
    def test_uniform_color(self):
        """Test that the average of a solid region is that colour."""
        image = solid_image(20, 20, (12, 34, 56, 255))
        color = average_color(image, (0, 0), (19, 0), (0, 19))
        np.testing.assert_array_equal(color, [12, 34, 56, 255])
        assert color.dtype == np.uint8
    
    def test_truncated_mean(self):
        """Test the truncated 16-bit mean shifted back to 8 bits."""
        image = solid_image(4, 4, (0, 0, 0, 255))
        image[0, 0, 0] = 10
        image[0, 1, 0] = 20
        image[1, 0, 0] = 31
        
        color = average_color(image, (0, 0), (1, 0), (0, 1))
        # (61 * 257) // 3 = 5225, 5225 >> 8 = 20
        np.testing.assert_array_equal(color, [20, 0, 0, 255])
    
    def test_sixteen_bit_buffer(self):
        """Test averaging on 16-bit buffers keeps full precision."""
        image = solid_image(4, 4, (0, 0, 0, 65535), dtype=np.uint16)
        image[0, 0, 1] = 1000
        image[0, 1, 1] = 2001
        
        color = average_color(image, (0, 0), (1, 0), (0, 1))
        assert color.dtype == np.uint16
        np.testing.assert_array_equal(color, [0, 1000, 0, 65535])
    
    def test_no_pixels_is_opaque_black(self):
        """Test the fallback colour for triangles covering no source pixel."""
        image = solid_image(10, 10, (200, 200, 200, 255))
        
        off_buffer = average_color(image, (100, 100), (110, 100), (100, 110))
        degenerate = average_color(image, (0, 0), (1, 1), (2, 2))
        
        np.testing.assert_array_equal(off_buffer, [0, 0, 0, 255])
        np.testing.assert_array_equal(degenerate, [0, 0, 0, 255])
    
    def test_unsupported_dtype(self):
        """Test that float buffers are rejected."""
        with pytest.raises(TypeError):
            average_color(np.zeros((4, 4, 4), dtype=np.float32), (0, 0), (1, 0), (0, 1))


class TestRasterize:
    """Test cases for triangle fill."""
    
    def test_fill_writes_covered_pixels(self):
        """Test that exactly the covered pixels are written."""
        dest = solid_image(4, 4, (0, 0, 0, 255))
        fill_triangle(dest, (0, 0), (1, 0), (0, 1), RED)
        
        assert np.array_equal(dest[0, 0], RED)
        assert np.array_equal(dest[0, 1], RED)
        assert np.array_equal(dest[1, 0], RED)
        assert np.array_equal(dest[1, 1], [0, 0, 0, 255])
    
    def test_degenerate_leaves_destination(self):
        """Test that a zero-area triangle leaves the destination untouched."""
        source = solid_image(10, 10, (9, 9, 9, 255))
        source[3, 3] = (250, 1, 1, 255)
        dest = source.copy()
        
        rasterize(source, dest, np.array([[0, 0], [4, 4], [9, 9]], dtype=float))
        rasterize(source, dest, np.array([[5, 5], [5, 5], [5, 5]], dtype=float))
        
        np.testing.assert_array_equal(dest, source)
    
    def test_rasterize_fills_average(self):
        """Test that rasterize fills the triangle with the source average."""
        source = solid_image(10, 10, (0, 100, 0, 255))
        dest = solid_image(10, 10, (0, 0, 0, 0))
        
        rasterize(source, dest, np.array([[0, 0], [9, 0], [0, 9]], dtype=float))
        
        np.testing.assert_array_equal(dest[0, 0], [0, 100, 0, 255])
        np.testing.assert_array_equal(dest[9, 9], [0, 0, 0, 0])
    
    def test_destination_with_smaller_bounds(self):
        """Test that the destination is clipped to its own bounds."""
        source = solid_image(20, 20, (7, 8, 9, 255))
        dest = solid_image(5, 5, (0, 0, 0, 0))
        
        rasterize(source, dest, np.array([[0, 0], [19, 0], [0, 19]], dtype=float))
        
        assert np.all(dest == [7, 8, 9, 255])
    
    def test_overlap_last_write_wins(self):
        """Test that pixels on a shared edge take the colour written last."""
        upper = ((0, 0), (10, 0), (0, 10))
        lower = ((10, 0), (10, 10), (0, 10))
        
        dest = solid_image(11, 11, (0, 0, 0, 255))
        fill_triangle(dest, *upper, RED)
        fill_triangle(dest, *lower, BLUE)
        assert np.array_equal(dest[5, 5], BLUE)
        
        dest = solid_image(11, 11, (0, 0, 0, 255))
        fill_triangle(dest, *lower, BLUE)
        fill_triangle(dest, *upper, RED)
        assert np.array_equal(dest[5, 5], RED)
