import unittest

from linkcrawler.url import Address


class TestAddressParsing(unittest.TestCase):
    def test_components(self):
        address = Address.parse("HTTP://X.Test:8080/a/b?q=1#top")
        self.assertEqual(address.scheme, "http")
        self.assertEqual(address.host, "x.test")
        self.assertEqual(address.port, 8080)
        self.assertEqual(address.path, "/a/b")
        self.assertEqual(address.query, "q=1")
        self.assertEqual(address.fragment, "top")

    def test_default_port_is_80(self):
        self.assertEqual(Address.parse("http://x.test/").port, 80)

    def test_relative_and_schemeless(self):
        relative = Address.parse("/about")
        self.assertTrue(relative.is_relative())
        self.assertTrue(relative.is_schemeless())

        schemeless = Address.parse("//cdn.x.test/lib")
        self.assertFalse(schemeless.is_relative())
        self.assertTrue(schemeless.is_schemeless())
        self.assertEqual(schemeless.host, "cdn.x.test")

    def test_crawlable_schemes(self):
        self.assertTrue(Address.parse("http://x.test/").has_crawlable_scheme())
        self.assertTrue(Address.parse("https://x.test/").has_crawlable_scheme())
        self.assertTrue(Address.parse("//x.test/").has_crawlable_scheme())
        self.assertFalse(Address.parse("javascript:void(0)").has_crawlable_scheme())
        self.assertFalse(Address.parse("mailto:someone@x.test").has_crawlable_scheme())

    def test_malformed_input_never_raises(self):
        broken = Address.parse("http://[::1")
        self.assertIsNone(broken.host)
        self.assertIsNone(broken.scheme)

        bad_port = Address.parse("http://x.test:abc/page")
        self.assertEqual(bad_port.host, "x.test")
        self.assertEqual(bad_port.port, 80)

        self.assertEqual(Address.parse("").render(), ":///")


class TestAddressRendering(unittest.TestCase):
    def test_fragment_stripped(self):
        self.assertEqual(Address.parse("http://x.test/a#frag").without_fragment().render(), "http://x.test/a")

    def test_port_80_omitted(self):
        self.assertEqual(Address.parse("http://x.test:80/a").render(), "http://x.test/a")

    def test_other_port_rendered(self):
        self.assertEqual(Address.parse("http://x.test:8080/a").render(), "http://x.test:8080/a")
        self.assertEqual(Address.parse("http://x.test/a").with_port(8080).render(), "http://x.test:8080/a")

    def test_query_rendered(self):
        self.assertEqual(str(Address.parse("http://x.test/search?q=a&p=2")), "http://x.test/search?q=a&p=2")

    def test_empty_path_renders_root(self):
        self.assertEqual(str(Address.parse("http://x.test")), "http://x.test/")

    def test_fragment_in_path_dropped(self):
        address = Address.parse("http://x.test/").with_path("/docs#intro")
        self.assertEqual(address.without_fragment().path, "/docs")
        self.assertEqual(str(address.without_fragment()), "http://x.test/docs")


class TestAddressValueSemantics(unittest.TestCase):
    def test_equality_ignores_fragment(self):
        first = Address.parse("http://x.test/a#one")
        second = Address.parse("http://x.test/a#two")
        self.assertEqual(first, second)
        self.assertEqual(hash(first), hash(second))
        self.assertEqual(len({first, second}), 1)

    def test_different_query_is_different_address(self):
        self.assertNotEqual(Address.parse("http://x.test/a?p=1"), Address.parse("http://x.test/a?p=2"))

    def test_mutators_return_new_values(self):
        original = Address.parse("http://x.test/a")
        changed = original.with_host("y.test").with_scheme("https")
        self.assertEqual(str(original), "http://x.test/a")
        self.assertEqual(str(changed), "https://y.test/a")

    def test_segments(self):
        address = Address.parse("http://x.test/a/b/c/")
        self.assertEqual(address.segments(), ["a", "b", "c"])
        self.assertEqual(address.segment(2), "b")
        self.assertIsNone(address.segment(4))
        self.assertIsNone(address.segment(0))


if __name__ == "__main__":
    unittest.main()
