from lxml import etree

from xmlcontent_api.content.types import get_simple_type, is_simple_type, simple_type_names


def element(xml: str):
    return etree.fromstring(xml)


def test_registry():
    assert is_simple_type("OpenCmsString")
    assert not is_simple_type("OpenCmsArticle")
    assert get_simple_type("OpenCmsUnknown") is None
    assert "OpenCmsHtml" in simple_type_names()


def test_string_value_keeps_whitespace():
    value = get_simple_type("OpenCmsString").string_value(element("<Title><![CDATA[ a b ]]></Title>"))
    assert value == " a b "


def test_empty_string_value():
    assert get_simple_type("OpenCmsString").string_value(element("<Title/>")) == ""


def test_html_reads_content_child():
    html = element("<Text><links><link><target>/x</target></link></links><content><![CDATA[<p>x</p>]]></content></Text>")
    assert get_simple_type("OpenCmsHtml").string_value(html) == "<p>x</p>"


def test_html_without_content_child():
    assert get_simple_type("OpenCmsHtml").string_value(element("<Text>plain</Text>")) == "plain"


def test_vfs_file_reads_link_target():
    link = element("<Image><link type='WEAK'><target><![CDATA[ /sites/a.png ]]></target><uuid>1</uuid></link></Image>")
    assert get_simple_type("OpenCmsVfsFile").string_value(link) == "/sites/a.png"


def test_var_link_external():
    assert get_simple_type("OpenCmsVarLink").string_value(element("<Link> https://x.org </Link>")) == "https://x.org"


def test_boolean_typed_value():
    boolean = get_simple_type("OpenCmsBoolean")
    assert boolean.typed_value(element("<B>true</B>")) is True
    assert boolean.typed_value(element("<B> FALSE </B>")) is False
    assert boolean.typed_value(element("<B>maybe</B>")) == "maybe"
    assert boolean.string_value(element("<B>true</B>")) == "true"


def test_datetime_typed_value():
    date = get_simple_type("OpenCmsDateTime")
    assert date.typed_value(element("<D>1700000000000</D>")) == 1700000000000
    assert date.typed_value(element("<D>soon</D>")) == "soon"


def test_serial_date_typed_value():
    serial = get_simple_type("OpenCmsSerialDate")
    assert serial.typed_value(element('<S><![CDATA[{"from": "1", "pattern": {"type": "NONE"}}]]></S>')) == {
        "from": "1",
        "pattern": {"type": "NONE"},
    }
    assert serial.typed_value(element("<S>not json</S>")) == "not json"
