"""Shared QTI documents for the test suite."""

import pytest


QTI12_CHOICE = b"""<?xml version="1.0" encoding="UTF-8"?>
<questestinterop>
  <item ident="q1" title="Capital of France" maxattempts="2">
    <itemmetadata>
      <qtimetadata>
        <qtimetadatafield>
          <fieldlabel>qmd_interactiontype</fieldlabel>
          <fieldentry>choiceInteraction</fieldentry>
        </qtimetadatafield>
      </qtimetadata>
    </itemmetadata>
    <presentation>
      <material>
        <mattext texttype="text/plain">Which city is the capital of France?</mattext>
      </material>
      <response_lid ident="RESP1" rcardinality="single">
        <render_choice shuffle="yes">
          <response_label ident="A"><material><mattext>Berlin</mattext></material></response_label>
          <response_label ident="B"><material><mattext>Paris</mattext></material></response_label>
          <response_label ident="C"><material><mattext>Rome</mattext></material></response_label>
        </render_choice>
      </response_lid>
    </presentation>
    <resprocessing scoremodel="SumOfScores">
      <outcomes>
        <decvar varname="SCORE" vartype="integer" defaultval="0"/>
      </outcomes>
      <respcondition continue="no">
        <conditionvar>
          <varequal respident="RESP1">B</varequal>
        </conditionvar>
        <setvar action="set" varname="SCORE">1</setvar>
      </respcondition>
    </resprocessing>
  </item>
</questestinterop>
"""

QTI12_MIXED = b"""<?xml version="1.0" encoding="UTF-8"?>
<questestinterop>
  <assessment ident="A1" title="Mixed quiz">
    <section ident="S1" title="Part one">
      <item ident="fib1" title="Short answer">
        <presentation>
          <flow>
            <material>
              <mattext texttype="text/html">&lt;p&gt;Name the element&lt;br&gt;with symbol O&lt;/p&gt;</mattext>
              <matimage uri="oxygen.png" width="120"/>
            </material>
            <response_str ident="R1">
              <render_fib fibtype="String" rows="1" maxchars="20"/>
            </response_str>
          </flow>
        </presentation>
        <resprocessing>
          <respcondition>
            <conditionvar>
              <or>
                <varequal respident="R1">Oxygen</varequal>
                <varequal respident="R1">oxygen</varequal>
              </or>
            </conditionvar>
            <setvar action="set">1</setvar>
          </respcondition>
        </resprocessing>
      </item>
      <section ident="S2" title="Part two">
        <item ident="essay1" title="Essay">
          <presentation>
            <material>
              <mattext>Describe photosynthesis.</mattext>
              <mataudio uri="prompt.mp3" audiotype="audio/mpeg"/>
            </material>
            <response_str ident="R2" rcardinality="single">
              <render_fib rows="5" maxchars="2000"/>
            </response_str>
          </presentation>
        </item>
      </section>
    </section>
  </assessment>
</questestinterop>
"""

QTI21_ITEM = b"""<?xml version="1.0" encoding="UTF-8"?>
<questestinterop version="2.1">
  <item ident="q1" title="Pairs">
    <metadata>
      <schemaversion>2.1</schemaversion>
      <qtimetadata>
        <interactiontype>choiceInteraction</interactiontype>
      </qtimetadata>
    </metadata>
    <responseDeclaration identifier="RESP" cardinality="single" baseType="pair">
      <correctResponse>
        <value>A B</value>
      </correctResponse>
    </responseDeclaration>
    <responseDeclaration identifier="UPLOAD" cardinality="single" baseType="file"/>
    <outcomeDeclaration identifier="SCORE" cardinality="single" baseType="float">
      <defaultValue>
        <value>0.0</value>
      </defaultValue>
    </outcomeDeclaration>
    <itemBody>
      <p>Pick the <span class="hint">right</span> pair.</p>
      <choiceInteraction responseIdentifier="RESP" shuffle="true" maxChoices="1">
        <prompt>Choose one</prompt>
        <simpleChoice identifier="A">First</simpleChoice>
        <simpleChoice identifier="B" fixed="true">Second</simpleChoice>
      </choiceInteraction>
    </itemBody>
    <rubricBlock view="testConstructor">Marking notes</rubricBlock>
  </item>
</questestinterop>
"""

QTI21_ASSESSMENT = b"""<?xml version="1.0" encoding="UTF-8"?>
<questestinterop version="2.2.3">
  <assessment ident="T1" title="Unit test">
    <section ident="S1" title="Only section">
      <item ident="i1" title="First">
        <responseDeclaration identifier="R1" cardinality="single" baseType="string"/>
        <itemBody>
          <textEntryInteraction responseIdentifier="R1" expectedLength="10"/>
        </itemBody>
      </item>
      <item ident="i2" title="Second">
        <responseDeclaration identifier="R2" cardinality="single" baseType="string"/>
        <itemBody>
          <extendedTextInteraction responseIdentifier="R2" expectedLines="4"/>
        </itemBody>
      </item>
    </section>
  </assessment>
</questestinterop>
"""


@pytest.fixture
def qti12_choice() -> bytes:
    return QTI12_CHOICE


@pytest.fixture
def qti12_mixed() -> bytes:
    return QTI12_MIXED


@pytest.fixture
def qti21_item() -> bytes:
    return QTI21_ITEM


@pytest.fixture
def qti21_assessment() -> bytes:
    return QTI21_ASSESSMENT
