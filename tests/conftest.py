from __future__ import annotations

import sys
from pathlib import Path


# Make the package importable when the tests run from a plain checkout
# without an editable install.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from pypdf import PdfWriter


INFO_BINARY = b"""trailer
<<
  /Root 37907 0 R
  /Info 1 0 R
  /ID [<DD4EDCDA157A2F8C5AC9278D8AB4BED7> <DD4EDCDA157A2F8C5AC9278D8AB4BED7>]
  /Size 37910
>>

1 0 obj
<<
/Title (PostgreSQL 12.2 Documentation)
/Author (The PostgreSQL Global Development Group)
/Creator (DocBook XSL Stylesheets with Apache FOP)
/Producer (Apache FOP Version 2.3)
/CreationDate (D:20200212212756Z)
>>
endobj

"""

METADATA_BINARY = b"""37907 0 obj
<<
  /Type /Catalog
  /Pages 11 0 R
  /Lang (en)
  /Metadata 5 0 R
  /PageLabels 37908 0 R
  /Outlines 29900 0 R
  /PageMode /UseOutlines
  /Names 37909 0 R
>>
endobj

endobj
5 0 obj
<<
  /Type /Metadata
  /Subtype /XML
  /Length 6 0 R
>>
stream
<?xpacket begin="\xef\xbb\xbf" id="W5M0MpCehiHzreSzNTczkc9d"?><x:xmpmeta xmlns:x="adobe:ns:meta/">
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
<rdf:Description xmlns:dc="http://purl.org/dc/elements/1.1/" rdf:about="">
<dc:creator>The PostgreSQL Global Development Group</dc:creator>
<dc:format>application/pdf</dc:format>
<dc:title>PostgreSQL 12.2 Documentation</dc:title>
<dc:language>en</dc:language>
<dc:date>2020-02-12T21:27:56Z</dc:date>
</rdf:Description>
<rdf:Description xmlns:pdf="http://ns.adobe.com/pdf/1.3/" rdf:about="">
<pdf:Producer>Apache FOP Version 2.3</pdf:Producer>
<pdf:PDFVersion>1.4</pdf:PDFVersion>
</rdf:Description>
<rdf:Description xmlns:xmp="http://ns.adobe.com/xap/1.0/" rdf:about="">
<xmp:CreatorTool>DocBook XSL Stylesheets with Apache FOP</xmp:CreatorTool>
<xmp:MetadataDate>2020-02-12T21:27:56Z</xmp:MetadataDate>
<xmp:CreateDate>2020-02-12T21:27:56Z</xmp:CreateDate>
</rdf:Description>
</rdf:RDF>
</x:xmpmeta><?xpacket end="r"?>

endstream
endobj
6 0 obj
976
"""

ENCRYPTED_TRAILER = b"""  trailer
  <<
     /Root 1 0 R
     /Info 7 0 R
     /Encrypt 52 0 R
     /ID [<1521FBE61419FCAD51878CC5D478D5FF> <1521FBE61419FCAD51878CC5D478D5FF> ]
     /Size 53
  >>
"""


@pytest.fixture()
def info_binary() -> bytes:
    return INFO_BINARY


@pytest.fixture()
def metadata_binary() -> bytes:
    return METADATA_BINARY


@pytest.fixture()
def encrypted_trailer() -> bytes:
    return ENCRYPTED_TRAILER


@pytest.fixture()
def document_binary() -> bytes:
    return b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n" + METADATA_BINARY + INFO_BINARY + b"%%EOF\n"


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "sample.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_metadata(
        {
            "/Title": "Test Document",
            "/Author": "Jürgen Müller",
            "/Subject": "Testing (with parentheses)",
            "/Keywords": "pdf,metadata",
            "/Creator": "pytest",
            "/CreationDate": "D:20230501120000+01'00'",
        }
    )
    with path.open("wb") as fp:
        writer.write(fp)
    return path


@pytest.fixture()
def encrypted_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "encrypted.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Title": "Secret"})
    writer.encrypt("secret")
    with path.open("wb") as fp:
        writer.write(fp)
    return path
