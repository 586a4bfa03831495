"""KYC compliance workflow with derived risk scoring.

Import from the submodules (warden.compliance.workflow, .risk, ...);
the configuration models depend on warden.compliance.models, so this
package stays free of eager imports.
"""
