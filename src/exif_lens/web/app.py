"""
Web UI for the gallery.
Serves the upload form, the filtered card grid and the bulk actions on top of
a GalleryController whose event loop runs in a LoopRunner thread.
"""

import io
import os

from flask import (
    Flask,
    Response,
    abort,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    url_for,
)

from ..core.controller import GalleryController
from ..core.errors import AnalysisError
from ..core.models import STATUS_FILTERS, SourceKind, UploadedFile, guess_content_type
from ..core.pipeline import fetch_image
from ..core.runner import LoopRunner
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

FILTER_LABELS = {
    "all": "All",
    "complete": "Complete",
    "analyzing": "Processing",
    "error": "Failed",
}

MAX_UPLOAD_BYTES = 64 * 1024 * 1024


def _active_filter(value) -> str:
    return value if value in STATUS_FILTERS else "all"


def create_app(controller: GalleryController, runner: LoopRunner) -> Flask:
    """Build the Flask app bound to `controller`, whose loop is hosted by `runner`."""
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES
    app.secret_key = os.environ.get("EXIF_LENS_SECRET_KEY") or os.urandom(16)

    def back_to_gallery():
        return redirect(url_for("index", filter=_active_filter(request.values.get("filter"))))

    def snapshot(active: str) -> dict:
        return {
            "items": controller.filter_by_status(active),
            "counts": controller.counts(),
            "selected": controller.selection.ids,
        }

    @app.route("/")
    def index():
        """Serve the gallery page."""
        active = _active_filter(request.args.get("filter"))
        view = runner.call(snapshot, active)
        return render_template(
            "index.html",
            active=active,
            filters=FILTER_LABELS,
            refresh=view["counts"]["analyzing"] > 0,
            **view,
        )

    @app.route("/upload", methods=["POST"])
    def upload():
        uploads = [
            UploadedFile(
                filename=f.filename,
                content_type=guess_content_type(f.filename, f.mimetype),
                data=f.read(),
            )
            for f in request.files.getlist("files")
            if f and f.filename
        ]
        if not uploads:
            flash("No files selected.")
            return redirect(url_for("index"))
        created = runner.call(controller.submit_files, uploads)
        skipped = len(uploads) - len(created)
        if skipped:
            flash(f"Skipped {skipped} file(s) that are not images.")
        return redirect(url_for("index"))

    @app.route("/url", methods=["POST"])
    def submit_url():
        url = request.form.get("url", "").strip()
        if not url:
            flash("Please enter an image URL.")
        else:
            runner.call(controller.submit_url, url)
        return redirect(url_for("index"))

    @app.route("/items/<item_id>/image")
    def item_image(item_id):
        """Serve the bytes behind an uploaded item's display handle."""
        blob = runner.call(controller.handles.get, item_id)
        if blob is None:
            abort(404)
        return send_file(io.BytesIO(blob.data), mimetype=blob.content_type)

    @app.route("/items/<item_id>/download")
    def item_download(item_id):
        item = runner.call(controller.get, item_id)
        if item is None:
            abort(404)
        if item.source_kind is SourceKind.URL:
            try:
                data, content_type = runner.run(fetch_image(item.url, controller.pipeline.fetch_timeout))
            except AnalysisError as err:
                logger.warning("Download of %s failed, redirecting: %s", item.url, err)
                return redirect(item.url)
            blob = UploadedFile(filename=item.url, content_type=content_type, data=data)
        else:
            blob = runner.call(controller.handles.get, item_id)
            if blob is None:
                abort(404)
        return send_file(
            io.BytesIO(blob.data),
            mimetype=blob.content_type,
            as_attachment=True,
            download_name=f"exifai-{item_id}.jpg",
        )

    @app.route("/items/<item_id>/toggle", methods=["POST"])
    def toggle(item_id):
        runner.call(controller.toggle, item_id)
        return back_to_gallery()

    @app.route("/items/<item_id>/delete", methods=["POST"])
    def delete_item(item_id):
        runner.call(controller.delete_items, [item_id])
        return back_to_gallery()

    @app.route("/selection/all", methods=["POST"])
    def select_all():
        runner.call(controller.select_all, _active_filter(request.values.get("filter")))
        return back_to_gallery()

    @app.route("/selection/clear", methods=["POST"])
    def clear_selection():
        runner.call(controller.clear_selection)
        return back_to_gallery()

    @app.route("/selection/delete", methods=["POST"])
    def bulk_delete():
        confirmed = request.form.get("confirm") == "yes"
        deleted = runner.call(controller.bulk_delete, lambda count: confirmed)
        if deleted:
            flash(f"Deleted {deleted} image(s).")
        return back_to_gallery()

    @app.route("/selection/export")
    def bulk_export():
        document = runner.call(controller.bulk_export)
        return Response(
            document.content,
            mimetype="application/json",
            headers={"Content-Disposition": f"attachment; filename={document.filename}"},
        )

    @app.route("/api/items")
    def api_items():
        """API endpoint with the filtered items and the per-status counts."""
        active = _active_filter(request.args.get("filter"))
        view = runner.call(snapshot, active)
        return jsonify({
            "filter": active,
            "items": [item.to_dict() for item in view["items"]],
            "counts": view["counts"],
            "selected": sorted(view["selected"]),
        })

    return app
