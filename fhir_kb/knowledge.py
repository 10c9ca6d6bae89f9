"""
Curated FHIR Implementation Guide knowledge.

Each topic carries the workflow structure, required resources, anti-patterns,
key operations and visual requirements that a correct diagram of that IG must
respect. Quibbles are short expert caveats attached at prompt time.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .errors import UnknownTopicError
from .schemas import EntityUsage, Topic
from .utils import bullet_list


def _entities(*pairs: Tuple[str, str]) -> List[EntityUsage]:
    return [EntityUsage(resource=resource, usage=usage) for resource, usage in pairs]


TOPICS: Tuple[Topic, ...] = (
    # Da Vinci (payer-provider data exchange)
    Topic(
        key="pdex",
        name="Da Vinci PDex - Payer Data Exchange",
        trigger_phrases=[
            "payer to payer", "payer data exchange", "pdex", "member switching plans",
            "health plan data transfer", "cms interoperability", "payer interoperability",
            "member data transfer", "plan switch", "coverage transition",
        ],
        workflow="""
MANDATORY TWO-PHASE WORKFLOW:

PHASE 1 - PATIENT CONSENT & ENROLLMENT (Business/Legal Layer)
Timing: Days or weeks before technical exchange
Actor: Patient initiates
Steps:
1. Patient enrolls with New Payer (Payer B)
2. Patient provides Old Payer (Payer A) member information
3. Patient signs consent authorizing data transfer
4. Consent resource created and stored at New Payer

PHASE 2 - TECHNICAL EXCHANGE (System-to-System Layer)
Timing: After consent exists
Actor: New Payer (Payer B) initiates
Steps:
1. Payer B authenticates to Payer A using SMART Backend Services OAuth
2. Payer B calls $member-match operation (includes Consent reference)
3. Payer A validates consent exists and is active
4. Payer A returns matched Patient identifier
5. Payer B calls $everything or Bulk $export
6. Payer B stores received data with Provenance (source: Payer A)

CRITICAL: These phases happen at DIFFERENT TIMES and must be visually separated.
""",
        entities=_entities(
            ("Consent", "Patient authorization for data transfer (Phase 1)"),
            ("Patient", "Member demographics"),
            ("Coverage", "Insurance plan information"),
            ("ExplanationOfBenefit", "Claims and encounter data - THIS IS THE CORRECT RESOURCE FOR CLAIMS"),
            ("Provenance", "Tracks data source/lineage after transfer"),
            ("DocumentReference", "Clinical summaries and unstructured data"),
        ),
        anti_patterns=[
            "NEVER use ClinicalImpression - it is for clinical decision support at point of care, NOT payer data exchange",
            "NEVER conflate patient consent (Phase 1) with system OAuth authentication (Phase 2)",
            "NEVER show direct Patient resource queries between payers - must use $member-match",
            "NEVER skip Provenance - data lineage tracking is required",
        ],
        key_operations=[
            "$member-match - Match patient across payers using demographics + coverage",
            "$everything - Retrieve all data for a patient",
            "$export - Bulk data export for multiple members",
        ],
        visual_requirements=[
            "Clear phase separation with labels (Phase 1: Business/Legal, Phase 2: Technical)",
            'Roadmap at top: "1. Enroll & Consent -> 2. Auth & Match -> 3. Retrieve -> 4. Store"',
            "Patient lane shows Phase 1 activity only",
            "Payer lanes show Phase 2 activity",
            'Group clinical resources as "Clinical Data" not individual resources',
            "Color coding: Clinical (blue), Administrative (green), Financial (orange)",
        ],
    ),
    Topic(
        key="pas",
        name="Da Vinci PAS - Prior Authorization Support",
        trigger_phrases=[
            "prior authorization", "prior auth", "pas", "pre-authorization",
            "service authorization", "pa request", "auth request", "preauth",
        ],
        workflow="""
PRIOR AUTHORIZATION WORKFLOW:

PHASE 1 - DETERMINE NEED
- Provider identifies service requiring prior authorization
- May be triggered by CRD (Coverage Requirements Discovery) hook
- Decision point: PA required for this service?

PHASE 2 - GATHER DOCUMENTATION
- Provider collects required clinical documentation
- May use DTR (Documentation Templates and Rules) for forms
- Bundle supporting resources

PHASE 3 - SUBMIT REQUEST
- Provider calls Claim/$submit operation
- Claim resource with use = "preauthorization"
- Includes: Patient, Coverage, ServiceRequest/MedicationRequest
- Includes: Supporting clinical documentation

PHASE 4 - PAYER ADJUDICATION
- Payer evaluates request (may be automated or manual)
- Payer returns ClaimResponse with outcome

PHASE 5 - ACT ON DECISION
- Approved: Proceed with service, include preAuthRef on final claim
- Denied: Appeal or modify request
- Pended: Provide additional information via Task
""",
        entities=_entities(
            ("Claim", "The PA request itself (use: preauthorization)"),
            ("ClaimResponse", "Payer decision with outcome and preAuthRef"),
            ("Patient", "Member being authorized"),
            ("Coverage", "Insurance information"),
            ("ServiceRequest", "Procedure/service being requested"),
            ("MedicationRequest", "Medication being requested (pharmacy PA)"),
            ("Task", "Follow-up requests for additional information"),
            ("Bundle", "Contains the complete PA request"),
        ),
        anti_patterns=[
            "NEVER use ClinicalImpression in PA workflows",
            "NEVER confuse Claim (request) with ExplanationOfBenefit (adjudicated claim)",
            "NEVER skip the ClaimResponse - it contains the actual decision",
        ],
        key_operations=[
            "$submit - Submit the prior authorization request",
        ],
        visual_requirements=[
            "Provider-Payer focus (two main swim lanes)",
            "Show the Bundle contents being submitted",
            "Show response outcomes: approved/denied/pended decision tree",
            'Roadmap: "1. Identify Need -> 2. Submit Request -> 3. Get Decision -> 4. Act"',
        ],
    ),
    Topic(
        key="cdex",
        name="Da Vinci CDex - Clinical Data Exchange",
        trigger_phrases=[
            "cdex", "clinical data exchange", "clinical data request", "data request",
            "attachments", "solicited attachment", "unsolicited attachment", "payer data request",
        ],
        workflow="""
CDex CLINICAL DATA EXCHANGE WORKFLOW:

IMPORTANT: PRIMARY DIRECTION IS PAYER -> PROVIDER (Payer requests data FROM Provider)
The Provider is the DATA HOLDER. The Payer is the DATA REQUESTER.

PATTERN 1 - DIRECT QUERY (Synchronous)
When payer needs simple, standardized data that exists in structured form:
1. Payer authenticates to Provider's FHIR server (SMART Backend Services)
2. Payer sends GET request for specific resources (Condition, Observation, etc.)
3. Provider returns requested resources immediately
4. Best for: Lab results, vitals, diagnoses

PATTERN 2 - TASK-BASED EXCHANGE (Asynchronous)
When payer needs complex data, documents, or human review is required:
1. Payer creates Task resource on Provider's FHIR server
   - Task.code: data-request-code OR data-request-questionnaire
   - Task.for: Patient reference
   - Task.requester: Payer organization
   - Task.owner: Provider organization (who must fulfill)
   - Task.input: Specifies what data is needed
2. Provider receives Task (status: requested)
3. Provider accepts Task (status: accepted -> in-progress)
4. Provider gathers clinical data (may involve human review)
5. Provider completes Task (status: completed)
   - Task.output: References to gathered resources
6. Payer retrieves output resources

TASK STATUS LIFECYCLE: requested -> accepted -> in-progress -> completed (or rejected/failed)

USE CASES:
- Prior Authorization attachments (integrates with PAS)
- Claims attachments
- Risk adjustment documentation
- Quality measure data
- Care gap closure evidence
""",
        entities=_entities(
            ("Task", "Async request/fulfill - the core CDex coordination resource"),
            ("Patient", "Subject of the data request"),
            ("Organization", "Requester (Payer) and Owner (Provider)"),
            ("DocumentReference", "Clinical documents returned as output"),
            ("Bundle", "Collection of clinical resources in response"),
            ("Condition", "Diagnoses - commonly requested"),
            ("Observation", "Labs, vitals - commonly requested"),
            ("Procedure", "Procedures performed - commonly requested"),
            ("DiagnosticReport", "Lab reports and imaging results"),
        ),
        anti_patterns=[
            "NEVER show Provider requesting from Payer - the PRIMARY flow is Payer requesting FROM Provider",
            "NEVER skip Task.status lifecycle - show the state transitions",
            "NEVER confuse direct query (GET) with Task-based (async) - they serve different purposes",
            "NEVER forget Task.code - it specifies what type of request this is",
            "NEVER use ClinicalImpression for CDex - use actual clinical resources",
        ],
        key_operations=[
            "$submit-attachment - Submit attachments for claims/prior auth",
        ],
        visual_requirements=[
            "PAYER on LEFT, PROVIDER on RIGHT - data flows RIGHT to LEFT (Provider -> Payer)",
            "Show both patterns OR clearly indicate which one",
            "For Task-based: Show full status lifecycle (requested -> accepted -> in-progress -> completed)",
            "Show Task.input (what is requested) and Task.output (what is returned)",
            "Mention integration with PAS for prior auth attachments",
            'Roadmap: "1. Request Data -> 2. Locate Patient -> 3. Gather Data -> 4. Transmit & Store"',
        ],
    ),
    Topic(
        key="crd",
        name="Da Vinci CRD - Coverage Requirements Discovery",
        trigger_phrases=[
            "coverage requirements", "crd", "coverage discovery", "payer requirements",
            "cds hooks", "decision support", "coverage check", "requirements discovery",
        ],
        workflow="""
CRD WORKFLOW (CDS Hooks Based):

PHASE 1 - HOOK TRIGGER
- Provider takes clinical action in EHR (order, prescription, etc.)
- EHR fires CDS Hook to Payer CDS Service
- Key hooks:
  * order-select: When order is being created
  * order-sign: When order is being finalized
  * appointment-book: When scheduling
  * encounter-start/discharge: Encounter lifecycle

PHASE 2 - PAYER EVALUATION
- Payer CDS Service receives hook with context (patient, coverage, order)
- Evaluates coverage rules for the requested service
- Determines: prior auth needed? documentation required? alternatives?

PHASE 3 - RESPONSE CARDS
- Payer returns CDS Cards to EHR
- Card types:
  * Coverage Information - what's covered, cost estimates
  * Documentation Requirements - what DTR forms are needed
  * Prior Auth Requirements - PA required, link to start
  * Alternative Suggestions - covered alternatives

PHASE 4 - PROVIDER ACTION
- Provider reviews cards in EHR
- Takes action: proceed, document, start PA, choose alternative
""",
        entities=_entities(
            ("CDS Hooks", "Hook request/response mechanism (not FHIR resource)"),
            ("Coverage", "Patient insurance context in hook"),
            ("Patient", "Patient context"),
            ("ServiceRequest", "Order being evaluated"),
            ("MedicationRequest", "Prescription being evaluated"),
        ),
        anti_patterns=[
            "NEVER show direct FHIR API calls - CRD uses CDS Hooks",
            "NEVER confuse CRD (discovery) with PAS (submission)",
            "NEVER show payer initiating - provider EHR fires the hook",
        ],
        key_operations=[
            "CDS Hook: order-select, order-sign, appointment-book",
        ],
        visual_requirements=[
            "Show CDS Hooks integration point between EHR and Payer",
            "Cards visual representing payer responses",
            "Timing: at point of care, before order finalization",
            'Roadmap: "1. Clinical Action -> 2. Fire Hook -> 3. Evaluate Coverage -> 4. Return Cards"',
        ],
    ),
    Topic(
        key="dtr",
        name="Da Vinci DTR - Documentation Templates and Rules",
        trigger_phrases=[
            "documentation templates", "dtr", "questionnaire", "forms",
            "documentation requirements", "payer forms", "smart forms", "cql forms",
        ],
        workflow="""
DTR WORKFLOW:

PHASE 1 - DISCOVER REQUIREMENTS
- CRD indicates documentation is needed
- Provider selects to complete documentation
- EHR launches DTR SMART app or native DTR functionality

PHASE 2 - RETRIEVE QUESTIONNAIRE
- DTR app fetches Questionnaire from payer
- Questionnaire contains CQL logic for pre-population
- May include adaptive questions (branch logic)

PHASE 3 - PRE-POPULATE
- DTR executes CQL in provider EHR context
- Automatically fills answers from EHR data (labs, diagnoses, etc.)
- Provider reviews and completes remaining fields

PHASE 4 - SUBMIT RESPONSE
- QuestionnaireResponse saved to provider's system
- Can be attached to prior auth request (PAS)
- Can be stored for audit/documentation purposes
""",
        entities=_entities(
            ("Questionnaire", "Payer-defined form with CQL logic"),
            ("QuestionnaireResponse", "Completed form responses"),
            ("Library", "CQL logic for pre-population"),
            ("Coverage", "Links form to specific coverage"),
        ),
        anti_patterns=[
            "NEVER show Questionnaire created by provider - payer defines templates",
            "NEVER skip pre-population - CQL automation is a key feature",
        ],
        key_operations=[
            "$questionnaire-package - Get questionnaire with dependencies",
            "CQL execution in provider context",
        ],
        visual_requirements=[
            "Show SMART app or embedded DTR in EHR",
            "Show CQL pre-population pulling from EHR data",
            "Questionnaire -> QuestionnaireResponse flow",
            'Roadmap: "1. Discover Need -> 2. Get Form -> 3. Pre-populate -> 4. Complete & Submit"',
        ],
    ),
    Topic(
        key="atr",
        name="Da Vinci ATR - Member Attribution",
        trigger_phrases=[
            "attribution", "atr", "member attribution", "patient panel",
            "attributed patients", "value based care", "vbc attribution", "risk contracts",
        ],
        workflow="""
MEMBER ATTRIBUTION WORKFLOW:

PHASE 1 - CONTRACT ESTABLISHMENT
- Payer and Provider establish value-based care contract
- Define attribution methodology (prospective vs retrospective)
- Set attribution refresh schedule (typically monthly)

PHASE 2 - ATTRIBUTION LIST CREATION
- Payer generates attribution list based on:
  * Claims history (retrospective)
  * Primary care assignment (prospective)
  * Care management enrollment
- Group resource created with member list

PHASE 3 - SHARE ATTRIBUTION
- Payer makes Group available via FHIR API
- Provider retrieves attributed patient list
- May use $davinci-data-export for bulk retrieval

PHASE 4 - USE FOR ACCESS CONTROL
- Provider Access API scoped to attributed patients
- Quality reporting scoped to attributed population
- Care gap outreach limited to attributed members
""",
        entities=_entities(
            ("Group", "Contains attributed patient list (atr-group profile)"),
            ("Patient", "Attributed members"),
            ("Practitioner", "Attributed provider"),
            ("Organization", "Provider organization in contract"),
            ("Coverage", "Plan coverage for members"),
        ),
        anti_patterns=[
            "NEVER show real-time attribution - lists are periodic",
            "NEVER confuse Group with CareTeam - Group is for population, CareTeam for individual",
        ],
        key_operations=[
            "$davinci-data-export - Bulk export for attributed population",
            "$member-add, $member-remove - Attribution list changes",
        ],
        visual_requirements=[
            "Show business context: value-based care contract",
            "Group resource as container for attributed patients",
            "Periodic refresh indication (not real-time)",
            'Roadmap: "1. Contract -> 2. Build List -> 3. Share -> 4. Scope Access"',
        ],
    ),
    Topic(
        key="hrex",
        name="Da Vinci HRex - Health Record Exchange",
        trigger_phrases=[
            "hrex", "health record exchange", "da vinci foundation",
            "member match", "consent patterns",
        ],
        workflow="""
HRex FOUNDATIONAL PATTERNS:

HRex is NOT a standalone IG - it provides patterns used by other Da Vinci IGs.

PATTERN 1 - MEMBER MATCH
- Used by PDex, ATR, and others
- Match patient across organizations using demographics + coverage
- $member-match operation

PATTERN 2 - TASK-BASED WORKFLOW
- Request/fulfill pattern for async operations
- Task.code indicates type of request
- Status lifecycle: requested -> accepted -> in-progress -> completed
- Used by CDex, PAS (for pended requests)

PATTERN 3 - CONSENT HANDLING
- Consent resource patterns for data sharing authorization
- Consent.provision defines scope and period
- Referenced by PDex, CDex

PATTERN 4 - COMMON PROFILES
- HRex Organization, Practitioner, Coverage profiles
- Referenced as base by other IGs
""",
        entities=_entities(
            ("Task", "Async request/fulfill pattern"),
            ("Consent", "Data sharing authorization"),
            ("Parameters", "$member-match input/output"),
            ("Coverage", "HRex Coverage profile"),
        ),
        anti_patterns=[
            "NEVER implement HRex in isolation - use with specific use case IG",
        ],
        key_operations=[
            "$member-match - Patient matching across organizations",
        ],
        visual_requirements=[
            "Show as foundation layer that other IGs build on",
            "If diagramming: show which IG is using HRex patterns",
        ],
    ),
    Topic(
        key="deqm",
        name="Da Vinci DEQM - Data Exchange for Quality Measures",
        trigger_phrases=[
            "quality measures", "deqm", "quality reporting", "hedis",
            "gaps in care", "quality data", "measure report", "ecqm",
        ],
        workflow="""
QUALITY MEASURE DATA EXCHANGE:

PATTERN 1 - SUBMIT DATA
Provider -> Payer/Registry direction
- Provider submits data for measure evaluation
- MeasureReport with status: data-collection
- Includes relevant clinical resources

PATTERN 2 - COLLECT DATA
Payer -> Provider direction
- Payer requests specific data for measures
- Provider returns MeasureReport with resources
- May use CDex Task pattern for async

PATTERN 3 - GAPS IN CARE
- Payer identifies missing quality actions
- DetectedIssue or custom gap report
- Provider uses to prioritize outreach

PATTERN 4 - MEASURE REPORTING
- Final MeasureReport with status: complete
- Individual (patient-level) or Summary (population)
- Includes calculated scores and populations
""",
        entities=_entities(
            ("MeasureReport", "Quality measure results - individual or summary"),
            ("Measure", "Definition of quality measure"),
            ("DetectedIssue", "Gaps in care identification"),
            ("Patient", "Subject of individual measure"),
            ("Group", "Population for summary measures"),
        ),
        anti_patterns=[
            "NEVER confuse Individual MeasureReport (1 patient) with Summary (population)",
            "NEVER skip the Measure reference - links to measure definition",
        ],
        key_operations=[
            "$submit-data - Submit quality data",
            "$collect-data - Request quality data",
            "$care-gaps - Get gaps in care report",
        ],
        visual_requirements=[
            "Show bidirectional flows (submit vs collect)",
            "MeasureReport as central artifact",
            "Gaps in care as actionable output",
            'Roadmap varies: Submit: "1. Gather -> 2. Package -> 3. Submit" / Collect: "1. Request -> 2. Gather -> 3. Return"',
        ],
    ),
    Topic(
        key="alerts",
        name="Da Vinci Alerts - Unsolicited Notifications",
        trigger_phrases=[
            "alerts", "notifications", "adt notifications", "admit discharge transfer",
            "unsolicited notifications", "event notifications", "admission alerts",
        ],
        workflow="""
UNSOLICITED NOTIFICATION WORKFLOW:

TRIGGER EVENTS:
- Patient admission
- Patient discharge
- Patient transfer
- Treatment changes
- New diagnoses

NOTIFICATION FLOW:
1. Event occurs at sending facility
2. Sender builds notification Bundle
3. Bundle contains:
   - MessageHeader (event type, sender, recipient)
   - Triggering resource (Encounter, Condition, etc.)
   - Supporting context (Patient, Coverage)
4. POST Bundle to receiver's endpoint
5. Receiver processes and acknowledges

NOTE: For new implementations, prefer Subscriptions IG for event-driven notifications.
Alerts is for direct push without subscription setup.
""",
        entities=_entities(
            ("Bundle", "Notification container (type: message)"),
            ("MessageHeader", "Notification metadata and event type"),
            ("Encounter", "Admission/discharge/transfer context"),
            ("Condition", "New diagnosis notifications"),
            ("Patient", "Subject of notification"),
            ("Coverage", "Insurance context"),
        ),
        anti_patterns=[
            "NEVER confuse with Subscriptions IG - Alerts is push, Subscriptions is subscribe-then-push",
        ],
        key_operations=[
            "$process-message - Process notification bundle",
        ],
        visual_requirements=[
            "Show push from sender to receiver (no subscription step)",
            "MessageHeader as routing information",
            "Event trigger clearly shown",
            'Roadmap: "1. Event Occurs -> 2. Build Notification -> 3. Send -> 4. Process"',
        ],
    ),
    Topic(
        key="ra",
        name="Da Vinci RA - Risk Adjustment",
        trigger_phrases=[
            "risk adjustment", "hcc", "hierarchical condition categories",
            "risk scores", "coding gaps", "raf", "risk adjustment factor",
        ],
        workflow="""
RISK ADJUSTMENT WORKFLOW:

PHASE 1 - IDENTIFY GAPS
- Payer analyzes claims/encounters for coding opportunities
- Identifies suspected conditions lacking HCC documentation
- Generates coding gap report

PHASE 2 - COMMUNICATE GAPS
- Payer sends gap report to Provider
- Report includes:
  * Patient
  * Suspected condition
  * Evidence/rationale
  * Documentation requirements

PHASE 3 - PROVIDER REVIEW
- Provider reviews during care encounter
- Confirms or rejects suspected conditions
- Documents appropriately in EHR

PHASE 4 - CLOSE GAPS
- Provider submits encounters with proper coding
- Payer updates risk scores
- Annual wellness visits are key opportunity
""",
        entities=_entities(
            ("MeasureReport", "Risk gap report"),
            ("Condition", "Suspected conditions for documentation"),
            ("DetectedIssue", "Coding gap identification"),
            ("Patient", "Member with gaps"),
        ),
        anti_patterns=[
            "NEVER show provider initiating gaps - payer identifies from claims analysis",
            "NEVER confuse with quality gaps (DEQM) - RA is about coding accuracy",
        ],
        key_operations=[
            "$report - Generate risk adjustment report",
        ],
        visual_requirements=[
            "Payer-to-Provider flow for gap communication",
            "Show suspected vs confirmed condition distinction",
            "Annual wellness visit as key touchpoint",
            'Roadmap: "1. Analyze Claims -> 2. Identify Gaps -> 3. Communicate -> 4. Document & Close"',
        ],
    ),
    Topic(
        key="pct",
        name="Da Vinci PCT - Patient Cost Transparency",
        trigger_phrases=[
            "patient cost", "pct", "good faith estimate", "gfe",
            "no surprises", "cost estimate", "aeob", "advanced eob",
        ],
        workflow="""
PATIENT COST TRANSPARENCY (No Surprises Act):

PHASE 1 - PROVIDER ESTIMATE (GFE)
- Patient requests estimate or scheduling triggers requirement
- Provider creates Good Faith Estimate (GFE)
- GFE Bundle contains expected services and charges
- Submitted to payer for AEOB

PHASE 2 - PAYER PROCESSING
- Payer receives GFE Bundle via $gfe-submit
- Applies coverage rules, network status, accumulators
- Calculates patient responsibility

PHASE 3 - ADVANCED EOB (AEOB)
- Payer returns Advanced EOB
- Shows expected patient costs
- Includes breakdown: deductible, copay, coinsurance

PHASE 4 - PATIENT RECEIVES
- Provider or payer delivers estimate to patient
- Patient makes informed decision
- Estimate valid for specified period
""",
        entities=_entities(
            ("Bundle", "GFE Bundle and AEOB Bundle"),
            ("Claim", "GFE claim with use: predetermination"),
            ("ExplanationOfBenefit", "AEOB with cost breakdown"),
            ("Coverage", "Patient insurance information"),
            ("Patient", "Requesting patient"),
        ),
        anti_patterns=[
            "NEVER confuse GFE (provider estimate) with AEOB (payer response)",
            "NEVER skip network status - major impact on patient costs",
        ],
        key_operations=[
            "$gfe-submit - Submit Good Faith Estimate",
            "$gfe-retrieve - Get GFE by identifier",
        ],
        visual_requirements=[
            "Three parties: Provider, Payer, Patient",
            "GFE Bundle -> AEOB response flow",
            "Cost breakdown visualization",
            'Roadmap: "1. Create GFE -> 2. Submit to Payer -> 3. Get AEOB -> 4. Deliver to Patient"',
        ],
    ),
    # CARIN Alliance
    Topic(
        key="carin",
        name="CARIN Blue Button - Consumer Claims Access",
        trigger_phrases=[
            "carin", "blue button", "consumer claims", "patient claims access",
            "c4bb", "member claims", "claims history", "carin bb",
        ],
        workflow="""
CONSUMER CLAIMS ACCESS WORKFLOW:

PHASE 1 - MEMBER AUTHORIZATION
- Member connects third-party app to payer portal
- SMART App Launch (patient-facing)
- Member authorizes claims data access

PHASE 2 - CLAIMS DATA RETRIEVAL
- App queries ExplanationOfBenefit endpoint
- Returns claims history in CARIN BB format
- Includes professional, institutional, pharmacy claims

CLAIM TYPES (Different Profiles):
- C4BB ExplanationOfBenefit Inpatient
- C4BB ExplanationOfBenefit Outpatient
- C4BB ExplanationOfBenefit Professional
- C4BB ExplanationOfBenefit Pharmacy
- C4BB ExplanationOfBenefit Oral

PHASE 3 - DATA USE
- Consumer views in app
- Can share with other apps/providers
- Historical claims for care coordination
""",
        entities=_entities(
            ("ExplanationOfBenefit", "Claims data - the core resource (multiple profiles for claim types)"),
            ("Coverage", "Insurance plan details"),
            ("Patient", "Member demographics"),
            ("Organization", "Payer and provider organizations"),
            ("Practitioner", "Rendering and referring providers"),
        ),
        anti_patterns=[
            "NEVER use Claim for consumer access - use ExplanationOfBenefit (adjudicated claims)",
            "NEVER use ClinicalImpression for claims data",
            "NEVER allow write access - CARIN BB is READ-ONLY",
        ],
        key_operations=[],
        visual_requirements=[
            "Consumer/member-centric view",
            "Show OAuth app authorization flow",
            "ExplanationOfBenefit as primary output",
            "Show different claim type profiles if relevant",
            'Roadmap: "1. Connect App -> 2. Authorize -> 3. Retrieve Claims"',
        ],
    ),
    Topic(
        key="carin-dic",
        name="CARIN Digital Insurance Card",
        trigger_phrases=[
            "insurance card", "digital insurance card", "dic", "member card",
            "insurance id card", "digital id card", "coverage card",
        ],
        workflow="""
DIGITAL INSURANCE CARD WORKFLOW:

PHASE 1 - MEMBER REQUEST
- Member opens app or payer portal
- Requests digital insurance card
- May be proactive (card in wallet) or on-demand

PHASE 2 - CARD RETRIEVAL
- App queries Coverage endpoint with card extension
- Returns structured data AND card images
- Card data includes: member ID, group, plan, dates

PHASE 3 - CARD DISPLAY
- Front card image (Binary resource)
- Back card image (Binary resource)
- Structured data for form-filling
- QR code for verification (optional)
""",
        entities=_entities(
            ("Coverage", "Insurance information with card extensions"),
            ("Binary", "Card images (front and back)"),
            ("Patient", "Member demographics"),
            ("Organization", "Payer information"),
        ),
        anti_patterns=[
            "NEVER return only structured data - card images are key use case",
        ],
        key_operations=[],
        visual_requirements=[
            "Show both structured data and visual card",
            "Front/back card images",
            "Member accessing via app",
            'Roadmap: "1. Request Card -> 2. Get Coverage + Images -> 3. Display"',
        ],
    ),
    # Foundational
    Topic(
        key="uscore",
        name="US Core - Clinical Data Access",
        trigger_phrases=[
            "us core", "patient access", "clinical data api", "patient portal",
            "uscdi", "patient data access", "ehr access", "patient records",
        ],
        workflow="""
PATIENT DATA ACCESS WORKFLOW:

PHASE 1 - AUTHORIZATION (SMART App Launch)
- Patient or Provider launches app
- App redirects to EHR authorization server
- User authenticates and authorizes requested scopes
- App receives access token with patient context

PHASE 2 - DATA ACCESS
- App queries FHIR server with bearer token
- Retrieves US Core profiled resources
- Respects granted scopes (patient/*.read, etc.)

KEY RESOURCE CATEGORIES (USCDI):
- Problems: Condition
- Medications: MedicationRequest
- Allergies: AllergyIntolerance
- Lab Results: Observation, DiagnosticReport
- Vital Signs: Observation (vital-signs category)
- Procedures: Procedure
- Immunizations: Immunization
- Clinical Notes: DocumentReference
""",
        entities=_entities(
            ("Patient", "Demographics with required extensions"),
            ("Condition", "Problems/diagnoses (category required)"),
            ("Observation", "Vitals and lab results (category: vital-signs or laboratory)"),
            ("MedicationRequest", "Active medications"),
            ("AllergyIntolerance", "Allergies and intolerances"),
            ("Procedure", "Procedures performed"),
            ("Immunization", "Vaccination records"),
            ("DiagnosticReport", "Lab reports and imaging"),
            ("DocumentReference", "Clinical notes (C-CDA on FHIR)"),
        ),
        anti_patterns=[
            "NEVER forget US Core required extensions on Patient: us-core-race, us-core-ethnicity, us-core-birthsex",
            "NEVER skip category on Condition and Observation - they are required",
        ],
        key_operations=[],
        visual_requirements=[
            "Show SMART App Launch OAuth flow",
            "Patient-centered (patient authorizes access)",
            "Group resources by USCDI category: Problems, Medications, Labs, Vitals, etc.",
            'Roadmap: "1. Launch -> 2. Authorize -> 3. Get Token -> 4. Query Data"',
        ],
    ),
    Topic(
        key="smart",
        name="SMART App Launch - Authorization",
        trigger_phrases=[
            "smart app launch", "smart on fhir", "oauth", "authorization",
            "app launch", "ehr launch", "standalone launch", "smart auth",
        ],
        workflow="""
SMART APP LAUNCH WORKFLOW:

STANDALONE LAUNCH:
1. App opens authorization URL with: client_id, redirect_uri, scope, state, aud
2. User authenticates at authorization server
3. User authorizes requested scopes
4. Redirect back to app with authorization code
5. App exchanges code for access token (+ refresh token, patient context)
6. App uses token to access FHIR resources

EHR LAUNCH:
1. EHR launches app with launch parameter
2. App requests authorization with launch scope
3. Token response includes EHR context (patient, encounter, etc.)
4. App uses context for FHIR queries

BACKEND SERVICES (System-to-System):
1. Client creates signed JWT assertion
2. POST to token endpoint with grant_type=client_credentials
3. Receive access token (no refresh token)
4. Use for system-level operations
""",
        entities=[],
        anti_patterns=[
            "NEVER confuse standalone launch (app opens first) with EHR launch (EHR opens app)",
            "NEVER use user-facing OAuth for backend services - use client credentials + JWT",
            "NEVER forget PKCE for public clients",
        ],
        key_operations=[],
        visual_requirements=[
            "Show different launch types as separate flows",
            "For EHR launch, show launch parameter flow",
            "For backend services, show JWT assertion",
            "Scopes prominently displayed",
            "Roadmap varies by type",
        ],
    ),
    Topic(
        key="bulk",
        name="Bulk Data - Population Health Export",
        trigger_phrases=[
            "bulk data", "population health", "$export", "bulk export",
            "ndjson", "backend services", "analytics", "quality measures", "flat fhir",
        ],
        workflow="""
BULK DATA EXPORT WORKFLOW:

PHASE 1 - SYSTEM AUTHENTICATION
- Backend Services OAuth (no user interaction)
- Client credentials + signed JWT assertion
- System-level scopes (system/*.read)

PHASE 2 - INITIATE EXPORT
- Kick off: GET [base]/Patient/$export or Group/[id]/$export
- Header: Prefer: respond-async
- Response: 202 Accepted + Content-Location header with polling URL

PHASE 3 - POLL FOR COMPLETION
- GET polling URL
- 202 while processing (X-Progress header for status)
- 200 when complete with manifest

PHASE 4 - DOWNLOAD FILES
- Manifest contains URLs to ndjson files
- One file per resource type
- Download with bearer token
""",
        entities=_entities(
            ("Group", "Defines patient cohort for Group-level export"),
            ("Patient", "Patient-level export retrieves all data for all patients"),
        ),
        anti_patterns=[
            "NEVER show user/patient in the flow - this is system-to-system",
            "NEVER forget the async pattern (polling)",
            "NEVER assume file order in ndjson output",
        ],
        key_operations=[
            "$export - Initiate bulk export (Patient-level or Group-level)",
        ],
        visual_requirements=[
            "System-to-system only (no patient actor)",
            "Show async pattern clearly: Kick-off -> Poll -> Download",
            "Show ndjson files as output",
            'Roadmap: "1. System Auth -> 2. Kick-off Export -> 3. Poll Status -> 4. Download ndjson"',
        ],
    ),
    Topic(
        key="subscriptions",
        name="FHIR Subscriptions - Real-time Notifications",
        trigger_phrases=[
            "subscription", "notifications", "real-time", "topic-based subscription",
            "webhook", "push notifications", "event notifications", "subscription topic",
        ],
        workflow="""
TOPIC-BASED SUBSCRIPTION WORKFLOW:

PHASE 1 - TOPIC DEFINITION (Server Admin)
- SubscriptionTopic resource defines what triggers notifications
- Specifies: trigger resource type, filter criteria, allowed payload content
- Topics are canonical - referenced by URL

PHASE 2 - CREATE SUBSCRIPTION (App)
- App creates Subscription resource referencing a Topic
- Specifies channel: rest-hook, websocket, email, or message
- Specifies endpoint URL for notifications
- Specifies payload type: empty, id-only, or full-resource
- Server validates and sets status: requested -> active

PHASE 3 - HANDSHAKE (Server -> App)
- For rest-hook: Server sends empty notification to validate endpoint
- App must respond with 200 OK
- Subscription becomes active only after successful handshake

PHASE 4 - TRIGGER EVENT (Server)
- Resource change matches SubscriptionTopic criteria
- Example: ClaimResponse updated with outcome (Prior Authorization decision)
- Example: Task created requesting additional documentation

PHASE 5 - SEND NOTIFICATION (Server -> App)
- Server builds notification Bundle (type: subscription-notification)
- First entry: SubscriptionStatus (event count, type, errors)
- Subsequent entries: Triggering resources (based on payload type)
- POST Bundle to endpoint

PHASE 6 - PROCESS (App)
- App receives Bundle
- Extracts SubscriptionStatus for metadata
- Processes payload resources
- May GET full resources if payload was id-only
""",
        entities=_entities(
            ("SubscriptionTopic", "Canonical definition of what triggers notifications (R5/backport)"),
            ("Subscription", "Instance that subscribes to a topic with channel config"),
            ("SubscriptionStatus", "First entry in notification Bundle - contains event metadata"),
            ("Bundle", "Notification container (type: subscription-notification)"),
        ),
        anti_patterns=[
            "NEVER conflate SubscriptionTopic (canonical definition) with Subscription (instance)",
            "NEVER forget the SubscriptionStatus resource - it is ALWAYS the first entry in notification Bundle",
            "NEVER skip the channel type - rest-hook, websocket, email, or message must be specified",
            "NEVER forget handshake for rest-hook channels",
            "Common healthcare use case: Prior Auth status notifications (ClaimResponse changes) - NOT just admissions",
        ],
        key_operations=[
            "$status - Get current status of a subscription",
            "$events - Retrieve missed events",
        ],
        visual_requirements=[
            "Show SubscriptionTopic as separate from Subscription",
            "Show channel type prominently (rest-hook is most common)",
            "Show notification Bundle structure with SubscriptionStatus first",
            "Show handshake step for rest-hook",
            'Roadmap: "1. Define Topic -> 2. Subscribe -> 3. Handshake -> 4. Trigger -> 5. Notify"',
            "Use Prior Authorization (ClaimResponse) as the trigger example - most relevant healthcare use case",
        ],
    ),
    Topic(
        key="provider-access",
        name="Provider Access API - Value-Based Care",
        trigger_phrases=[
            "provider access", "provider api", "provider directory",
            "attribution", "patient panel", "value-based care", "aco",
        ],
        workflow="""
PROVIDER ACCESS WORKFLOW:

PHASE 1 - APP REGISTRATION
- Provider organization registers app with payer/data holder
- Receives client credentials

PHASE 2 - PATIENT-PROVIDER ATTRIBUTION
- Provider/Organization is attributed to a patient panel
- Group resource defines which patients the provider can access
- Attribution sources:
  - Payer attribution list (value-based care contracts)
  - ACO/CIN roster
  - PCP assignment
  - Care team membership
- This determines the SCOPE of data access

PHASE 3 - AUTHENTICATION
- Backend Services OAuth (system-to-system)
- Or SMART App Launch if user context needed
- Scopes limited to attributed patients

PHASE 4 - DATA QUERY
- Query FHIR endpoints for attributed patients only
- Access restricted via Group membership
- GET Patient, Condition, Observation, etc.
""",
        entities=_entities(
            ("Group", "Defines attributed patient panel"),
            ("Patient", "Patient demographics"),
            ("Practitioner", "Provider being attributed"),
            ("Organization", "Provider organization"),
            ("Condition", "Patient conditions"),
            ("Observation", "Clinical observations"),
        ),
        anti_patterns=[
            "NEVER skip attribution - providers only access their attributed patients",
            "NEVER use ClinicalImpression for clinical data",
        ],
        key_operations=[],
        visual_requirements=[
            "MUST show Patient-Provider Attribution step prominently",
            "Group resource links Practitioner to Patient panel",
            "Show that access is scoped to attributed patients only",
            'Roadmap: "1. Register -> 2. Attribution -> 3. Authenticate -> 4. Query"',
        ],
    ),
    # Pharmacy
    Topic(
        key="formulary",
        name="PDex US Drug Formulary",
        trigger_phrases=[
            "formulary", "drug formulary", "medication formulary", "drug list",
            "tier", "drug coverage", "pdex formulary", "prescription coverage",
        ],
        workflow="""
DRUG FORMULARY ACCESS:

PHASE 1 - DISCOVER FORMULARIES
- Consumer/app queries InsurancePlan endpoint
- Gets list of plans for payer
- Each plan links to its formulary

PHASE 2 - SEARCH FORMULARY
- Query FormularyItem with drug code
- Returns coverage information:
  * Tier (1, 2, 3, etc.)
  * Prior auth required?
  * Step therapy required?
  * Quantity limits?

PHASE 3 - DRUG DETAILS
- Query MedicationKnowledge for drug info
- Package sizes, strengths, forms
- Alternative medications

PHASE 4 - COST COMPARISON
- Compare across plans
- Compare alternatives
- Factor in pharmacy type (retail vs mail)
""",
        entities=_entities(
            ("InsurancePlan", "Plan information with formulary reference"),
            ("FormularyItem", "Drug coverage details (tier, restrictions)"),
            ("MedicationKnowledge", "Drug information"),
            ("Location", "Pharmacy locations (retail vs mail)"),
        ),
        anti_patterns=[
            "NEVER confuse FormularyItem (coverage) with MedicationKnowledge (drug info)",
            "NEVER forget pharmacy type affects coverage",
        ],
        key_operations=[],
        visual_requirements=[
            "Consumer-facing application",
            "Show tier structure (1=generic, 2=preferred brand, etc.)",
            "Show restriction types (PA, ST, QL)",
            'Roadmap: "1. Select Plan -> 2. Search Drug -> 3. View Coverage -> 4. Compare Options"',
        ],
    ),
    Topic(
        key="plannet",
        name="PDex Plan-Net - Provider Directory",
        trigger_phrases=[
            "provider directory", "plan net", "plannet", "network directory",
            "find provider", "in-network", "provider search", "directory",
        ],
        workflow="""
PROVIDER DIRECTORY ACCESS:

SEARCH PATTERNS:
- Find providers by specialty
- Find providers by location
- Find providers in network
- Find organizations accepting new patients

KEY RELATIONSHIPS:
- Practitioner -> PractitionerRole -> Organization
- Organization -> OrganizationAffiliation -> Network
- HealthcareService -> Location
- InsurancePlan -> Network

QUERY FLOW:
1. Consumer selects insurance plan
2. Get Network(s) for plan
3. Search PractitionerRole with network filter
4. Get details: Practitioner, Location, HealthcareService
5. Display results with accepting status
""",
        entities=_entities(
            ("Practitioner", "Provider demographics and qualifications"),
            ("PractitionerRole", "Links practitioner to organization and network"),
            ("Organization", "Provider organizations"),
            ("OrganizationAffiliation", "Organization participation in networks"),
            ("Network", "Insurance network"),
            ("HealthcareService", "Services offered"),
            ("Location", "Physical locations"),
            ("InsurancePlan", "Links plans to networks"),
        ),
        anti_patterns=[
            "NEVER query Practitioner directly for network info - use PractitionerRole",
            "NEVER skip OrganizationAffiliation for organization-level network participation",
        ],
        key_operations=[],
        visual_requirements=[
            "Show relationship chain: Plan -> Network -> PractitionerRole -> Practitioner",
            "Consumer/member as initiator",
            "Location-based search visualization",
            'Roadmap: "1. Select Plan -> 2. Get Network -> 3. Search Providers -> 4. View Details"',
        ],
    ),
    Topic(
        key="specialty-rx",
        name="Specialty Medication Enrollment",
        trigger_phrases=[
            "specialty rx", "specialty pharmacy", "specialty medication",
            "patient enrollment", "hub", "manufacturer program", "patient support",
        ],
        workflow="""
SPECIALTY MEDICATION WORKFLOW:

PHASE 1 - PRESCRIPTION
- Provider prescribes specialty medication
- Identifies need for specialty pharmacy fulfillment
- May require prior authorization first

PHASE 2 - ENROLLMENT REQUEST
- Prescriber or pharmacy creates enrollment Task
- Task sent to hub vendor or specialty pharmacy
- Includes: prescription, patient demographics, insurance

PHASE 3 - PROGRAM ENROLLMENT
- Hub coordinates with manufacturer programs
- Patient support program enrollment
- Financial assistance evaluation
- Copay card enrollment

PHASE 4 - COORDINATION
- Specialty pharmacy receives prescription
- Benefits investigation
- Patient outreach and education
- Delivery scheduling

PHASE 5 - DISPENSING
- Medication shipped to patient or infusion center
- Administration instructions provided
- Ongoing refill management
""",
        entities=_entities(
            ("Task", "Enrollment request and tracking"),
            ("MedicationRequest", "Specialty prescription"),
            ("Patient", "Patient demographics"),
            ("Coverage", "Insurance information"),
            ("Organization", "Prescriber, pharmacy, hub, manufacturer"),
        ),
        anti_patterns=[
            "NEVER skip hub coordination - specialty meds usually require it",
            "NEVER confuse with regular e-prescribing workflow",
        ],
        key_operations=[],
        visual_requirements=[
            "Multiple parties: Prescriber, Hub, Specialty Pharmacy, Manufacturer, Patient",
            "Task-based coordination",
            "Enrollment as key step before dispensing",
            'Roadmap: "1. Prescribe -> 2. Enroll -> 3. Coordinate -> 4. Dispense"',
        ],
    ),
    # Quality measures
    Topic(
        key="qicore",
        name="QI-Core - Quality Improvement Core",
        trigger_phrases=[
            "qi core", "qicore", "quality improvement", "cql",
            "clinical quality", "measure profiles", "quality data model",
        ],
        workflow="""
QI-CORE PURPOSE:

QI-Core builds on US Core with quality-specific requirements:
- Adds profiles for negation (what was NOT done)
- Supports CQL (Clinical Quality Language) execution
- Used by quality measures for data requirements

KEY PATTERNS:

POSITIVE ASSERTIONS:
- Condition, Procedure, MedicationRequest, etc. from US Core
- Extended with measure-relevant elements

NEGATION PATTERNS:
- MedicationNotRequested - medication explicitly not ordered
- ProcedureNotDone - procedure explicitly not performed
- Includes reason for not doing (patient refused, contraindicated, etc.)
- Critical for measure exclusions

CQL INTEGRATION:
- CQL libraries reference QI-Core profiles
- DataRequirements specify what data measures need
- Enables portable measure logic
""",
        entities=_entities(
            ("US Core profiles", "Base clinical data profiles"),
            ("MedicationNotRequested", "Negation of medication order"),
            ("ProcedureNotDone", "Negation of procedure"),
            ("ServiceNotRequested", "Negation of service request"),
        ),
        anti_patterns=[
            "NEVER forget negation profiles for exclusion criteria",
            "NEVER use absence of data as negation - must be explicit",
        ],
        key_operations=[],
        visual_requirements=[
            "Show as layer on top of US Core",
            "Highlight negation patterns",
            "Show CQL linkage",
        ],
    ),
    Topic(
        key="cqfm",
        name="Quality Measure IG",
        trigger_phrases=[
            "quality measure", "cqfm", "ecqm", "measure definition",
            "cql measure", "measure authoring", "clinical quality measure",
        ],
        workflow="""
QUALITY MEASURE STRUCTURE:

MEASURE RESOURCE:
- scoring: proportion, ratio, continuous-variable, cohort
- type: process, outcome, structure
- improvementNotation: increase or decrease
- group: defines measure populations

POPULATION TYPES:
- Initial Population (IP) - starting denominator
- Denominator - eligible for measure
- Denominator Exclusion - valid reasons to exclude
- Numerator - met the measure criteria
- Numerator Exclusion - met criteria but excluded
- Denominator Exception - did not meet but excused

CQL LOGIC:
- Library contains reusable logic
- Each population references CQL expression
- Data requirements derived from CQL

MEASURE USE:
- Measures are canonical - referenced by URL
- MeasureReport contains evaluation results
- Can be individual or population-level
""",
        entities=_entities(
            ("Measure", "Measure definition with populations"),
            ("Library", "CQL logic library"),
            ("MeasureReport", "Evaluation results"),
            ("ValueSet", "Code sets used in logic"),
        ),
        anti_patterns=[
            "NEVER confuse scoring types - each has different calculation",
            "NEVER skip Library - CQL logic is not inline in Measure",
        ],
        key_operations=[
            "$evaluate-measure - Execute measure against data",
            "$data-requirements - Get data needs for measure",
        ],
        visual_requirements=[
            "Show Measure -> Library relationship",
            "Population funnel: IP -> Denom -> Numer",
            "Show exclusion/exception branches",
        ],
    ),
    # Clinical exchange
    Topic(
        key="c-cda",
        name="C-CDA on FHIR",
        trigger_phrases=[
            "ccda", "c-cda", "clinical document", "continuity of care",
            "ccd", "discharge summary", "clinical summary", "cda on fhir",
        ],
        workflow="""
C-CDA ON FHIR:

DOCUMENT TYPES:
- Continuity of Care Document (CCD)
- Discharge Summary
- Progress Note
- Consultation Note
- Referral Note

FHIR REPRESENTATION:
- DocumentReference points to document
- Binary contains the actual CDA content
- Or: Composition-based with sections mapped

SECTION MAPPING:
- Problems -> Condition resources
- Medications -> MedicationStatement/Request
- Allergies -> AllergyIntolerance
- Procedures -> Procedure
- Results -> Observation, DiagnosticReport
- Vital Signs -> Observation

EXCHANGE PATTERNS:
- Query DocumentReference by type
- Retrieve document content
- May be rendered or structured
""",
        entities=_entities(
            ("DocumentReference", "Metadata and pointer to document"),
            ("Binary", "Raw CDA document content"),
            ("Composition", "Structured document sections"),
            ("Bundle", "Document bundle (type: document)"),
        ),
        anti_patterns=[
            "NEVER assume C-CDA sections map 1:1 to FHIR resources",
            "NEVER skip DocumentReference metadata",
        ],
        key_operations=[
            "$document - Generate document from Composition",
        ],
        visual_requirements=[
            "Show document type hierarchy",
            "Section to FHIR resource mapping",
            "DocumentReference -> Binary relationship",
        ],
    ),
    Topic(
        key="ips",
        name="International Patient Summary",
        trigger_phrases=[
            "ips", "international patient summary", "cross border",
            "patient summary", "emergency access", "travel health",
        ],
        workflow="""
INTERNATIONAL PATIENT SUMMARY:

PURPOSE:
- Cross-border care scenarios
- Emergency access to patient information
- Travel health records
- Minimum viable patient summary

REQUIRED SECTIONS:
- Medication Summary
- Allergies and Intolerances
- Problem List

RECOMMENDED SECTIONS:
- Immunizations
- Procedures
- Medical Devices
- Diagnostic Results
- Vital Signs
- Past Illness History
- Pregnancy Status
- Social History
- Functional Status
- Plan of Care

STRUCTURE:
- Bundle type: document
- First entry: Composition
- Composition.type: 60591-5 (Patient summary)
- Sections reference contained resources
""",
        entities=_entities(
            ("Bundle", "Document bundle containing IPS"),
            ("Composition", "Organizes sections"),
            ("Patient", "Subject of summary"),
            ("AllergyIntolerance", "Required section"),
            ("MedicationStatement", "Required section"),
            ("Condition", "Required section"),
        ),
        anti_patterns=[
            "NEVER use Bundle type: collection - must be document",
            'NEVER skip required sections (even if empty - use "no known" entries)',
        ],
        key_operations=[
            "$summary - Generate IPS for patient",
        ],
        visual_requirements=[
            "Document structure with Composition sections",
            "Required vs recommended sections",
            "Cross-border use case context",
        ],
    ),
    # Financial
    Topic(
        key="eligibility",
        name="Coverage Eligibility",
        trigger_phrases=[
            "eligibility", "coverage check", "benefit check", "insurance verification",
            "coverage eligibility", "benefit verification", "270 271",
        ],
        workflow="""
COVERAGE ELIGIBILITY CHECK:

PHASE 1 - ELIGIBILITY REQUEST
- Provider/app creates CoverageEligibilityRequest
- Specifies: patient, coverage, date(s), service type (optional)
- Can be general or service-specific query

PHASE 2 - PAYER PROCESSING
- Payer validates coverage
- Checks benefits for service type if specified
- Calculates remaining benefits based on accumulators

PHASE 3 - ELIGIBILITY RESPONSE
- CoverageEligibilityResponse returned
- Contains:
  * Coverage status (active/cancelled)
  * Benefit details (deductible, copay, coinsurance)
  * Limitations and maximums
  * Remaining amounts (accumulators)
  * Prior auth requirements

QUERY TYPES:
- General eligibility: Is coverage active?
- Benefits inquiry: What's covered for this service?
- Specific service: Is this specific service covered?
""",
        entities=_entities(
            ("CoverageEligibilityRequest", "Eligibility inquiry"),
            ("CoverageEligibilityResponse", "Eligibility and benefit details"),
            ("Coverage", "Insurance plan being queried"),
            ("Patient", "Member being verified"),
            ("Organization", "Payer"),
        ),
        anti_patterns=[
            "NEVER confuse with claims (Claim/ClaimResponse) - this is inquiry only",
            "NEVER skip the response - contains actual benefit information",
        ],
        key_operations=[],
        visual_requirements=[
            "Provider -> Payer inquiry/response",
            "Show benefit breakdown in response",
            "Real-time transaction (not async)",
            'Roadmap: "1. Create Request -> 2. Submit -> 3. Get Response -> 4. Use Benefits Info"',
        ],
    ),
    Topic(
        key="claim",
        name="Claims Processing",
        trigger_phrases=[
            "claim", "claims", "billing", "claim submission",
            "837", "claim processing", "remittance", "claim response",
        ],
        workflow="""
CLAIMS WORKFLOW:

CLAIM USES:
- claim: Actual billing for services rendered
- preauthorization: Prior auth request (see PAS)
- predetermination: Cost estimate (see PCT)

PHASE 1 - CLAIM CREATION
- Provider bundles claim data:
  * Patient, Coverage
  * Line items with procedures/services
  * Diagnoses
  * Supporting documentation

PHASE 2 - SUBMISSION
- Professional vs Institutional claim types
- Submit via $submit operation or POST
- May be real-time or batch

PHASE 3 - ADJUDICATION
- Payer processes claim
- Applies coverage rules
- Determines payment

PHASE 4 - RESPONSE
- ClaimResponse with outcome:
  * complete: Fully processed
  * error: Could not process
  * partial: Some items processed
  * queued: Will process later
- Payment details if approved
- Denial reasons if rejected
""",
        entities=_entities(
            ("Claim", "The claim being submitted"),
            ("ClaimResponse", "Adjudication result"),
            ("Patient", "Member billed for"),
            ("Coverage", "Insurance being billed"),
            ("Practitioner", "Rendering provider"),
            ("Organization", "Billing provider organization"),
        ),
        anti_patterns=[
            "NEVER confuse Claim with ExplanationOfBenefit - EOB is post-adjudication for consumers",
            "NEVER submit preauthorization as regular claim",
        ],
        key_operations=[
            "$submit - Submit claim for processing",
        ],
        visual_requirements=[
            "Provider -> Payer submission flow",
            "Show claim type differentiation",
            "Show outcome codes",
            'Roadmap: "1. Create Claim -> 2. Submit -> 3. Adjudicate -> 4. Get Response"',
        ],
    ),
    # Referral and orders
    Topic(
        key="bser",
        name="BSeR - Bidirectional Services eReferral",
        trigger_phrases=[
            "bser", "ereferral", "referral", "social determinants",
            "sdoh", "diabetes prevention", "tobacco cessation", "obesity",
        ],
        workflow="""
BIDIRECTIONAL SERVICES eREFERRAL:

USE CASES:
- Diabetes Prevention Program (DPP)
- Tobacco Cessation
- Obesity/Weight Management
- Chronic Disease Management
- Social Services Referral

PHASE 1 - REFERRAL INITIATION
- Provider identifies patient need
- Creates ServiceRequest referral
- Includes: patient, reason, supporting info
- Task created for tracking

PHASE 2 - REFERRAL TRANSMISSION
- ServiceRequest sent to receiving organization
- May be community-based organization (CBO)
- Task status: requested

PHASE 3 - REFERRAL ACCEPTANCE
- Receiver reviews referral
- Accepts or rejects
- Task status: accepted or rejected

PHASE 4 - SERVICE DELIVERY
- Program/service delivered to patient
- Task status: in-progress
- Progress documented

PHASE 5 - FEEDBACK LOOP
- Results sent back to referring provider
- DocumentReference with outcomes
- Task status: completed
""",
        entities=_entities(
            ("ServiceRequest", "The referral request"),
            ("Task", "Tracking referral fulfillment"),
            ("Patient", "Subject of referral"),
            ("Observation", "Supporting clinical info and outcomes"),
            ("DocumentReference", "Feedback documents"),
            ("Organization", "Referring and receiving organizations"),
        ),
        anti_patterns=[
            "NEVER skip the feedback loop - bidirectional is key",
            "NEVER confuse with simple order - includes social/community services",
        ],
        key_operations=[],
        visual_requirements=[
            "Bidirectional flow: Referral out, Feedback back",
            "Multiple organization types (healthcare + CBO)",
            "Task-based tracking throughout",
            'Roadmap: "1. Identify Need -> 2. Send Referral -> 3. Deliver Service -> 4. Return Feedback"',
        ],
    ),
    Topic(
        key="eltss",
        name="eLTSS - Electronic Long-Term Services and Supports",
        trigger_phrases=[
            "eltss", "long term services", "ltss", "medicaid ltss",
            "home care", "personal care", "waiver services", "care plan",
        ],
        workflow="""
ELECTRONIC LONG-TERM SERVICES AND SUPPORTS:

CONTEXT:
- Medicaid LTSS programs
- Home and Community-Based Services (HCBS)
- Waiver programs
- Supports for elderly/disabled

PHASE 1 - ASSESSMENT
- Person-centered assessment
- Identifies support needs
- Documents goals and preferences

PHASE 2 - CARE PLAN DEVELOPMENT
- CarePlan as central resource
- Goals linked to activities
- Services identified to meet goals
- Responsible parties assigned

PHASE 3 - SERVICE AUTHORIZATION
- Services authorized under waiver/program
- Claim/preauthorization for services
- Budget/allocation tracking

PHASE 4 - SERVICE DELIVERY
- Services delivered per plan
- Multiple service providers may be involved
- Guardians/representatives may authorize

PHASE 5 - MONITORING
- Progress toward goals
- Care plan updates
- Reassessment triggers
""",
        entities=_entities(
            ("CarePlan", "Central care plan document"),
            ("Goal", "Person-centered goals"),
            ("ServiceRequest", "Services in the plan"),
            ("Patient", "Person receiving services"),
            ("RelatedPerson", "Guardians, representatives"),
            ("Consent", "Authorization from person/guardian"),
            ("Observation", "Assessment findings"),
        ),
        anti_patterns=[
            "NEVER skip person-centered approach - individual goals are key",
            "NEVER forget guardian/representative consent patterns",
        ],
        key_operations=[],
        visual_requirements=[
            "Person at center (person-centered planning)",
            "CarePlan -> Goals -> Services relationships",
            "Multiple provider/organization involvement",
            "Guardian/representative roles",
            'Roadmap: "1. Assess -> 2. Plan -> 3. Authorize -> 4. Deliver -> 5. Monitor"',
        ],
    ),
    # Public health
    Topic(
        key="ecr",
        name="eCR - Electronic Case Reporting",
        trigger_phrases=[
            "ecr", "case reporting", "electronic case reporting",
            "reportable condition", "public health reporting", "eicr",
        ],
        workflow="""
ELECTRONIC CASE REPORTING:

TRIGGER:
- Provider EHR detects reportable condition
- Based on diagnosis code, lab result, etc.
- Automated trigger (RCTC - Reportable Condition Trigger Codes)

PHASE 1 - GENERATE eICR
- EHR generates electronic Initial Case Report (eICR)
- Document bundle with patient and condition info
- Automatically assembled from EHR data

PHASE 2 - TRANSMIT TO PHA
- eICR sent to Public Health Authority
- Via AIMS platform or direct transmission
- Routing based on patient jurisdiction

PHASE 3 - PUBLIC HEALTH PROCESSING
- PHA receives and processes report
- May request additional information
- Epidemiological investigation if needed

PHASE 4 - REPORTABILITY RESPONSE (RR)
- PHA returns Reportability Response
- Confirms receipt
- Indicates if condition is reportable in jurisdiction
- May include instructions for provider
""",
        entities=_entities(
            ("Bundle", "eICR document bundle"),
            ("Composition", "eICR document structure"),
            ("Patient", "Case subject"),
            ("Condition", "Reportable condition"),
            ("Observation", "Lab results, findings"),
            ("Encounter", "Visit context"),
        ),
        anti_patterns=[
            "NEVER skip automated triggering - manual reporting is backup only",
            "NEVER confuse eICR (report) with RR (response)",
        ],
        key_operations=[],
        visual_requirements=[
            "EHR -> Public Health flow",
            "Automated trigger point",
            "Bidirectional: eICR out, RR back",
            'Roadmap: "1. Detect Condition -> 2. Generate eICR -> 3. Transmit -> 4. Receive RR"',
        ],
    ),
    Topic(
        key="medmorph",
        name="MedMorph - Public Health Reporting Framework",
        trigger_phrases=[
            "medmorph", "public health framework", "health data exchange",
            "research reporting", "registry reporting", "cancer registry",
        ],
        workflow="""
MEDMORPH FRAMEWORK:

PURPOSE:
- Standardized framework for public health and research reporting
- Goes beyond eCR to other use cases:
  * Cancer registry reporting
  * Health survey reporting
  * Research data submission
  * Chronic disease reporting

COMPONENTS:
- Knowledge Artifacts: Define what/when to report
- Backend Services: Automated system-to-system auth
- Subscriptions: Trigger-based reporting

PHASE 1 - KNOWLEDGE DISTRIBUTION
- Public Health/Research defines reporting requirements
- PlanDefinition describes triggers and actions
- Distributed to healthcare organizations

PHASE 2 - SUBSCRIPTION/TRIGGER
- EHR subscribes to relevant events
- Trigger condition met (diagnosis, procedure, etc.)

PHASE 3 - DATA COLLECTION
- Gather relevant data per Knowledge Artifact
- May include clinical, administrative data
- Bundle assembled

PHASE 4 - TRANSMISSION
- Backend Services auth to receiving system
- Submit data bundle
- Track submission status
""",
        entities=_entities(
            ("PlanDefinition", "Knowledge artifact defining reporting rules"),
            ("Bundle", "Submitted data package"),
            ("MessageHeader", "Routing information"),
            ("Subscription", "Event-based triggering"),
        ),
        anti_patterns=[
            "NEVER implement without Knowledge Artifact - defines the rules",
            "NEVER skip Backend Services auth - system-to-system",
        ],
        key_operations=[
            "$process-message - Process reporting bundle",
        ],
        visual_requirements=[
            "Knowledge Artifact distribution layer",
            "Trigger-based automated reporting",
            "Healthcare -> Public Health/Research flow",
            'Roadmap: "1. Distribute Rules -> 2. Subscribe -> 3. Trigger -> 4. Collect -> 5. Submit"',
        ],
    ),
)


# Expert-level nitpicks FHIR specialists will notice, keyed by topic
QUIBBLES: Dict[str, List[str]] = {
    # Da Vinci
    "pdex": [
        "The 5-year data retention requirement means old payers must keep data accessible even after member leaves",
        "Consent.provision.period defines the authorization window - show this is time-bounded",
        "Multiple Coverage resources may exist - one per plan the member had",
        "Provenance.agent should identify BOTH the original source (Payer A) AND the transmitter",
        '$member-match can return "no match" - show this as a possible outcome',
    ],
    "pas": [
        "ClaimResponse.outcome has specific codes: complete, error, partial, queued - use exact terms",
        "preAuthRef is returned in ClaimResponse.preAuthRef - this MUST be included on the final claim",
        "X12 278 is the underlying standard - FHIR is a facade over EDI transactions",
        "Pended requests use Task resource for follow-up - Task.code indicates what info is needed",
        "Prior auth may require MULTIPLE submissions for complex services (e.g., surgery + anesthesia)",
    ],
    "cdex": [
        "PRIMARY DIRECTION: Payer requests clinical data FROM Provider - this is the flagship use case",
        "Two patterns exist: Direct Query (sync) vs Task-based (async) - clarify which is shown",
        "Task.status lifecycle: requested -> accepted -> in-progress -> completed",
        "Task.code specifies request type: data-request-code, data-request-questionnaire",
        "Integrates with PAS - attachments for prior authorization are a key use case",
        "Provider is the DATA HOLDER, Payer is the DATA REQUESTER in primary flow",
    ],
    "crd": [
        "CRD uses CDS Hooks - not direct FHIR API calls. Show the hook trigger points",
        "order-select and order-sign are the key hooks - different timing in workflow",
        "Cards returned can be: coverage information, documentation requirements, or prior auth needs",
        "The provider system calls the payer CDS service - not the other way around",
    ],
    "dtr": [
        "DTR executes payer-provided CQL/questionnaires IN the provider EHR context",
        "Questionnaire resources are retrieved from payer, filled by provider, stored back",
        "Pre-population uses CQL to pull data from EHR automatically",
        "QuestionnaireResponse links back to the triggering order and coverage",
    ],
    "atr": [
        "Attribution is not real-time - lists are typically refreshed monthly or quarterly",
        "Group resource contains the attributed patient list - Group.member references Patients",
        "Contracts (value-based care) are the trigger for attribution - show the business context",
        "Attribution can be prospective or retrospective based on contract type",
    ],
    "hrex": [
        "HRex is FOUNDATIONAL - other Da Vinci IGs inherit from it. It is not standalone.",
        "Defines Task patterns used across multiple IGs (CDex, PAS, etc.)",
        "Member Match operation is defined here and used by PDex, ATR",
        "Consent handling patterns are defined here",
    ],
    "alerts": [
        'The preferred term is "Notifications" not "Alerts" in recent versions',
        "Uses MessageHeader with event codes to signal notification type",
        "ADT (Admit/Discharge/Transfer) notifications are the primary use case",
        "Subscriptions IG is preferred for new implementations - Alerts is for direct push",
    ],
    "deqm": [
        "MeasureReport is the core resource - Individual (patient-level) or Summary (population)",
        "Gaps in Care (GIC) reporting identifies missing quality actions",
        "Submit data vs Collect data - two different reporting directions",
        "Links to specific quality measures via Measure.url canonical reference",
    ],
    "ra": [
        "Risk Adjustment coding gaps are communicated payer-to-provider",
        "HCC (Hierarchical Condition Category) codes drive risk scores",
        "Suspected conditions vs confirmed conditions have different handling",
        "Annual wellness visits are key opportunities for gap closure",
    ],
    "pcde": [
        "Coverage Decision Exchange is about formulary/benefit decisions, not clinical data",
        "Payer provides coverage decision info back to provider for patient discussion",
        "Often triggered after CRD indicates coverage limitations",
    ],
    "pct": [
        "Good Faith Estimate (GFE) is the provider-submitted estimate",
        "Advanced EOB (AEOB) is the payer response with expected costs",
        "No Surprises Act compliance is the key driver",
        "Network status affects out-of-pocket calculations significantly",
    ],
    "vbpr": [
        "Value-Based Performance Reporting aggregates quality and cost data",
        "Uses MeasureReport from DEQM for quality metrics",
        "Attribution from ATR defines which patients count toward performance",
    ],
    # CARIN
    "carin": [
        "ExplanationOfBenefit has multiple profiles: Inpatient, Outpatient, Professional, Pharmacy - each has different required fields",
        "EOB.total shows the full cost breakdown - adjudication at item level shows line-item decisions",
        "Coverage.class identifies the specific plan within a payer",
        "CARIN BB is READ-ONLY - consumers cannot modify claims data",
    ],
    "carin-dic": [
        "Digital Insurance Card returns card images AND structured data",
        "Coverage resource extended with card-specific elements",
        "Front and back card images may be separate Binary resources",
    ],
    "carin-rtpbc": [
        "Real-Time Pharmacy Benefit Check happens BEFORE prescription is finalized",
        "Returns patient cost, alternatives, and coverage information",
        "Integrates with e-prescribing workflows at pharmacy selection",
    ],
    # Foundational
    "uscore": [
        'Patient.identifier requires BOTH system and value - show as "system|value" format',
        'Observation.category is 1..* (required AND repeatable) - vitals need "vital-signs" category',
        "us-core-race and us-core-ethnicity use OMB categories with specific coding",
        'MedicationRequest.status must be "active" for current medications',
        "DocumentReference for C-CDA must have type from US Core DocumentReference Type ValueSet",
    ],
    "smart": [
        'The "launch" scope is ONLY for EHR launch - standalone launch does not use it',
        "PKCE (code_verifier/code_challenge) is REQUIRED for public clients",
        "Refresh tokens may have shorter lifetime than access tokens - handle refresh failures gracefully",
        "Backend services use RS384 or ES384 for JWT signing - not HS256",
        'The "aud" parameter must match the FHIR server base URL exactly',
    ],
    "bulk": [
        "The polling URL (Content-Location) is opaque - clients must not parse or construct it",
        "X-Progress header during polling gives human-readable status",
        "ndjson files are NOT guaranteed to be in any order - clients must handle out-of-order processing",
        "Bulk export can be scoped by _type parameter to limit resource types returned",
        "Group/$export requires the client to have access to that specific Group",
    ],
    "subscriptions": [
        "Server Admins define SubscriptionTopics independently - Apps DISCOVER topics, they do not create them",
        'After Subscription creation, server returns Subscription with status="active" (or "error") - show this status transition',
        'Handshake notification is an EMPTY notification (no payload resources) - just SubscriptionStatus with type="handshake"',
        "Heartbeat notifications are periodic - they confirm the subscription is still active",
        "If using rest-hook, the endpoint URL must be pre-registered and validated",
        "Common use case: Prior Authorization status updates - ClaimResponse changes trigger notifications to providers",
    ],
    # Quality and clinical
    "qicore": [
        "QI-Core profiles add quality measure requirements on top of US Core",
        "negation patterns (e.g., MedicationNotRequested) are important for exclusions",
        "Links to CQL (Clinical Quality Language) for measure logic",
    ],
    "cqfm": [
        "Quality Measures are defined as Measure resources with CQL logic",
        "measure.scoring determines type: proportion, ratio, continuous-variable, cohort",
        "Libraries contain reusable CQL that measures reference",
    ],
    # Specialty
    "formulary": [
        "FormularyItem links drugs to coverage plans with tier and restrictions",
        "MedicationKnowledge describes the drug itself",
        "Formulary coverage can vary by pharmacy type (retail vs mail-order)",
    ],
    "plannet": [
        "PractitionerRole connects Practitioner to Organization to Location",
        "Network defines the insurance network - OrganizationAffiliation links to it",
        "HealthcareService describes specific services offered at locations",
    ],
    "provider-access": [
        "Attribution lists are typically refreshed monthly - show this is not real-time",
        "Group membership can change retroactively for claims purposes",
        "Provider NPIs must be validated against NPPES registry",
        "Attribution can be prospective (assigned) or retrospective (based on claims history)",
    ],
    # Pharmacy
    "specialty-rx": [
        "Hub vendors coordinate between prescribers, pharmacies, and manufacturers",
        "Enrollment in patient support programs is a key use case",
        "Task-based workflow for specialty medication dispensing",
    ],
    "meds": [
        "MedicationRequest for orders, MedicationDispense for fills, MedicationAdministration for given doses",
        "MedicationStatement is patient-reported - different from clinical record",
    ],
    # Clinical exchange
    "c-cda": [
        "C-CDA on FHIR wraps CDA documents in DocumentReference + Binary",
        "section templates map to FHIR Composition.section",
        "Not a pure FHIR representation - maintains CDA semantics",
    ],
    "ips": [
        "International Patient Summary is designed for cross-border data exchange",
        "Composition organizes sections: allergies, medications, problems, etc.",
        'Bundle type is "document" not "collection"',
    ],
    # Financial
    "eligibility": [
        "CoverageEligibilityRequest is the inquiry, CoverageEligibilityResponse is the answer",
        "Can check for general eligibility or specific service coverage",
        "Benefits returned may include copay, deductible, out-of-pocket max",
    ],
    "claim": [
        "Claim.use: claim (billing), preauthorization (PA request), predetermination (estimate)",
        "ClaimResponse.outcome: queued, complete, error, partial",
        "Claim flows are typically synchronous in FHIR unlike X12 batch processing",
    ],
    # Referral and orders
    "bser": [
        "Bidirectional Services eReferrals focus on social determinants (SDOH)",
        "ServiceRequest initiates, Task tracks fulfillment, DocumentReference returns results",
        "Key use cases: diabetes prevention, tobacco cessation, obesity referrals",
    ],
    "eltss": [
        "Electronic Long-Term Services and Supports for Medicaid LTSS",
        "CarePlan is central - links to services, goals, and responsible parties",
        "Guardian/representative consent patterns are important",
    ],
    # Public health
    "ecr": [
        "Electronic Case Reporting is triggered by reportable condition detection",
        "eICR (initial report) goes to public health, RR (response) comes back",
        "Automated triggering from EHR based on diagnosis codes",
    ],
    "medmorph": [
        "MedMorph provides a framework for public health reporting beyond eCR",
        "Knowledge Artifacts define when/what to report",
        "Backend Services auth for system-to-system reporting",
    ],
}


_TOPICS_BY_KEY: Dict[str, Topic] = {topic.key: topic for topic in TOPICS}


def get_topic(key: str) -> Topic:
    """Look up a topic by key."""
    try:
        return _TOPICS_BY_KEY[key]
    except KeyError:
        raise UnknownTopicError(key) from None


def get_quibbles(key: str) -> List[str]:
    """Quibbles for a topic; topics without any yield an empty list."""
    return list(QUIBBLES.get(key, []))


def detect_topics(text: str) -> List[str]:
    """
    Return keys of topics whose trigger phrases occur in the text.

    Matching is case-insensitive substring search; keys are ordered by the
    number of distinct phrases matched, then by catalog order.
    """
    lowered = text.lower()
    hits: List[Tuple[int, int, str]] = []
    for position, topic in enumerate(TOPICS):
        count = sum(1 for phrase in topic.trigger_phrases if phrase.lower() in lowered)
        if count:
            hits.append((-count, position, topic.key))
    return [key for _, _, key in sorted(hits)]


def build_expert_chunk(topic: Topic) -> str:
    """Render a topic as a single knowledge block for embedding."""
    entities = bullet_list(f"{entity.resource}: {entity.usage}" for entity in topic.entities)
    operations = ""
    if topic.key_operations:
        operations = f"KEY OPERATIONS:\n{bullet_list(topic.key_operations)}\n\n"

    return (
        f"[FHIR IG: {topic.name}]\n\n"
        f"TRIGGER PHRASES: {', '.join(topic.trigger_phrases)}\n\n"
        f"{topic.workflow.strip()}\n\n"
        f"REQUIRED RESOURCES:\n{entities}\n\n"
        f"ANTI-PATTERNS (DO NOT DO):\n{bullet_list(topic.anti_patterns)}\n\n"
        f"{operations}"
        f"VISUAL REQUIREMENTS:\n{bullet_list(topic.visual_requirements)}\n"
    )
